import pytest

from docserve.cache import ContentCache
from docserve.config import ServerConfig
from docserve.content_type import ContentTypeResolver
from docserve.handler import RequestHandler
from docserve.resolver import PathResolver

PNG_BYTES = b'\x89PNG\r\n\x1a\n' + b'\x00\x00\x00\rIHDR' + b'\x00' * 32
INDEX_HTML = b'<!DOCTYPE html>\n<html><body>home</body></html>\n'


@pytest.fixture
def site(tmp_path):
    root = tmp_path / 'site'
    (root / 'css').mkdir(parents=True)
    (root / 'img').mkdir()
    (root / 'index.html').write_bytes(INDEX_HTML)
    (root / 'css' / 'site.css').write_bytes(b'body { color: red; }\n')
    (root / 'app.js').write_bytes(b'console.log("hi");\n')
    (root / 'img' / 'logo.png').write_bytes(PNG_BYTES)
    (root / 'photo.bin').write_bytes(PNG_BYTES)
    (root / 'README').write_bytes(b'plain text without an extension\n')
    return root


@pytest.fixture
def make_handler(site):
    def factory(cache=False, default_doc='index.html', root=None):
        root_dir = str(root or site)
        config = ServerConfig(root_directory=root_dir, default_doc=default_doc, enable_cache=cache)
        resolver = PathResolver(config.root_directory, config.default_doc)
        return RequestHandler(config, resolver, ContentTypeResolver(), ContentCache() if cache else None)
    return factory


class FakeSocket:
    """Socket stand-in that replays a request and records what is sent."""

    def __init__(self, request=b'', chunk_size=7):
        self._pending = request
        self._chunk_size = chunk_size
        self.sent = b''

    def recv(self, size):
        chunk = self._pending[:min(size, self._chunk_size)]
        self._pending = self._pending[len(chunk):]
        return chunk

    def sendall(self, data):
        self.sent += data


def parse_raw_response(raw):
    head, _, body = raw.partition(b'\r\n\r\n')
    lines = head.decode('latin-1').split('\r\n')
    status = int(lines[0].split()[1])
    headers = dict(line.split(': ', 1) for line in lines[1:])
    return status, headers, body
