import os

import pytest

import docserve.precache as precache_module
from docserve.cache import ContentCache
from docserve.content_type import ContentTypeResolver
from docserve.precache import PrecacheError, load_tree
from conftest import PNG_BYTES


def _tree_size(root):
    total = 0
    for dirpath, _, filenames in os.walk(root):
        for name in filenames:
            total += os.path.getsize(os.path.join(dirpath, name))
    return total


def test_precache_loads_whole_tree(site):
    cache = ContentCache()
    content_types = ContentTypeResolver()

    size, elapsed = load_tree(str(site), cache, content_types)

    assert size == _tree_size(site)
    assert elapsed >= 0
    assert len(cache) == 6
    assert cache.total_bytes() == size

    logo = cache.lookup(str(site / 'img' / 'logo.png'))
    assert logo.content == PNG_BYTES
    assert logo.content_type == 'image/png'
    assert cache.lookup(str(site / 'css' / 'site.css')).content_type == 'text/css; charset=utf-8'


def test_precache_fills_content_type_memo(site):
    content_types = ContentTypeResolver()
    load_tree(str(site), ContentCache(), content_types)

    assert content_types.types['.bin'] == 'image/png'
    assert content_types.types['.png'] == 'image/png'


def test_precache_empty_directory(tmp_path):
    cache = ContentCache()
    size, _ = load_tree(str(tmp_path), cache, ContentTypeResolver())

    assert size == 0
    assert len(cache) == 0


@pytest.mark.skipif(os.name != 'posix' or os.geteuid() == 0, reason='needs file permissions to apply')
def test_unreadable_file_aborts(site):
    locked = site / 'locked.txt'
    locked.write_bytes(b'secret')
    locked.chmod(0)
    try:
        with pytest.raises(PrecacheError):
            load_tree(str(site), ContentCache(), ContentTypeResolver())
    finally:
        locked.chmod(0o644)


def test_read_error_aborts(site, monkeypatch):
    assert precache_module.__name__ == 'docserve.precache'

    def failing_open(path, mode='r'):
        raise PermissionError(13, 'Permission denied', path)

    monkeypatch.setattr(precache_module, 'open', failing_open, raising=False)

    with pytest.raises(PrecacheError) as info:
        load_tree(str(site), ContentCache(), ContentTypeResolver())
    assert isinstance(info.value.__cause__, PermissionError)


def test_missing_root_aborts(tmp_path):
    with pytest.raises(PrecacheError):
        load_tree(str(tmp_path / 'nope'), ContentCache(), ContentTypeResolver())
