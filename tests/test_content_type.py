import docserve.content_type as content_type_module
from docserve.content_type import ContentTypeResolver, STATIC_TYPES
from conftest import PNG_BYTES


def test_static_types_do_not_touch_content(monkeypatch):
    def fail(data):
        raise AssertionError('content must not be sniffed')

    monkeypatch.setattr(content_type_module, 'detect_content_type', fail)
    resolver = ContentTypeResolver()

    for ext, expected in STATIC_TYPES.items():
        assert resolver.resolve('/srv/file' + ext, None) == expected


def test_registry_lookup_is_memoized():
    resolver = ContentTypeResolver()
    assert '.pdf' not in resolver

    assert resolver.resolve('/srv/paper.pdf', b'not a pdf at all') == 'application/pdf'
    assert resolver.types['.pdf'] == 'application/pdf'


def test_unknown_extension_is_sniffed_and_memoized(monkeypatch):
    calls = []
    real_detect = content_type_module.detect_content_type

    def counting_detect(data):
        calls.append(data)
        return real_detect(data)

    monkeypatch.setattr(content_type_module, 'detect_content_type', counting_detect)
    resolver = ContentTypeResolver()

    assert resolver.resolve('/srv/photo.bin', PNG_BYTES) == 'image/png'
    assert resolver.resolve('/srv/other.bin', PNG_BYTES) == 'image/png'
    assert len(calls) == 1


def test_memo_is_per_extension_and_can_mistag():
    # Files sharing an extension share the first resolved type
    resolver = ContentTypeResolver()
    assert resolver.resolve('/srv/a.bin', PNG_BYTES) == 'image/png'
    assert resolver.resolve('/srv/b.bin', b'just some text\n') == 'image/png'


def test_extension_case_is_kept():
    resolver = ContentTypeResolver()
    resolver.resolve('/srv/IMAGE.QQZ', PNG_BYTES)
    assert '.QQZ' in resolver
    assert '.qqz' not in resolver


def test_generic_type_is_not_memoized():
    resolver = ContentTypeResolver()
    binary = b'\x00\x01\x02\x03'
    assert resolver.resolve('/srv/blob.zzunknown', binary) == 'application/octet-stream'
    assert '.zzunknown' not in resolver

    # A later file with sniffable content still gets a real type
    assert resolver.resolve('/srv/next.zzunknown', PNG_BYTES) == 'image/png'


def test_empty_extension_always_sniffs():
    resolver = ContentTypeResolver()
    count = len(resolver)

    assert resolver.resolve('/srv/README', b'hello\n') == 'text/plain; charset=utf-8'
    assert resolver.resolve('/srv/LOGO', PNG_BYTES) == 'image/png'
    assert len(resolver) == count


def test_only_first_512_bytes_are_passed_to_sniffer(monkeypatch):
    seen = []
    monkeypatch.setattr(content_type_module, 'detect_content_type', lambda data: seen.append(len(data)) or 'text/plain')

    ContentTypeResolver().resolve('/srv/big.zzbig', b'x' * 4096)
    assert seen == [512]


def test_compression_suffixes_come_from_registry(monkeypatch):
    def fail(data):
        raise AssertionError('content must not be sniffed')

    monkeypatch.setattr(content_type_module, 'detect_content_type', fail)
    resolver = ContentTypeResolver()

    assert resolver.resolve('/srv/site.tar.gz', b'\x1f\x8b\x08\x00') in ('application/gzip', 'application/x-gzip')
    assert resolver.resolve('/srv/dump.xz', b'\xfd7zXZ\x00').endswith('xz')
    assert '.gz' in resolver
