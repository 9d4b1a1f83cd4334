import pytest

from docserve.sniff import detect_content_type


@pytest.mark.parametrize('data, expected', [
    (b'', 'text/plain; charset=utf-8'),
    (b'Hello, world\n', 'text/plain; charset=utf-8'),
    (b'  \n<!DOCTYPE html><html>', 'text/html; charset=utf-8'),
    (b'<HtMl><body>', 'text/html; charset=utf-8'),
    (b'<p>paragraph</p>', 'text/html; charset=utf-8'),
    (b'<!-- comment -->', 'text/html; charset=utf-8'),
    (b'\n<?xml version="1.0"?><root/>', 'text/xml; charset=utf-8'),
    (b'%PDF-1.7\n', 'application/pdf'),
    (b'GIF89a\x01\x00', 'image/gif'),
    (b'\x89PNG\r\n\x1a\n\x00\x00', 'image/png'),
    (b'\xff\xd8\xff\xe0\x00\x10JFIF', 'image/jpeg'),
    (b'RIFF\x10\x00\x00\x00WEBPVP8 ', 'image/webp'),
    (b'RIFF\x10\x00\x00\x00WAVEfmt ', 'audio/wave'),
    (b'ID3\x03\x00', 'audio/mpeg'),
    (b'wOF2\x00\x01', 'font/woff2'),
    (b'PK\x03\x04\x14\x00', 'application/zip'),
    (b'\x1f\x8b\x08\x00', 'application/x-gzip'),
    (b'\x00asm\x01\x00\x00\x00', 'application/wasm'),
    (b'\xef\xbb\xbfhello', 'text/plain; charset=utf-8'),
    (b'\xfe\xff\x00h', 'text/plain; charset=utf-16be'),
    (b'\x00\x01\x02\x03binary', 'application/octet-stream'),
])
def test_detect_content_type(data, expected):
    assert detect_content_type(data) == expected


def test_html_tag_must_be_terminated():
    assert detect_content_type(b'<bogus>') == 'text/plain; charset=utf-8'
    assert detect_content_type(b'<a href="/">') == 'text/html; charset=utf-8'


def test_mp4_box():
    data = b'\x00\x00\x00\x18ftypmp42\x00\x00\x00\x00mp42isom'
    assert detect_content_type(data) == 'video/mp4'


def test_only_first_512_bytes_are_inspected():
    data = b'a' * 512 + b'\x00\x01\x02'
    assert detect_content_type(data) == 'text/plain; charset=utf-8'
