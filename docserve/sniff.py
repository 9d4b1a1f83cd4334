#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Content sniffing for docserve.

Guesses a MIME type from the first bytes of a file by matching well known
signatures (the WHATWG MIME sniffing rules). Used when neither the extension
table nor the mimetypes registry know a file's extension.
"""

import struct

SNIFF_LENGTH = 512
DEFAULT_TYPE = 'application/octet-stream'
TEXT_TYPE = 'text/plain; charset=utf-8'

WHITESPACE = b'\t\n\x0c\r '
# Bytes that never appear in plain text
BINARY_BYTES = frozenset(list(range(0x00, 0x09)) + [0x0B] + list(range(0x0E, 0x1B)) + list(range(0x1C, 0x20)))


def _exact(prefix, content_type):
    def match(data, first_non_ws):
        if data.startswith(prefix):
            return content_type
        return None
    return match


def _masked(mask, pattern, content_type, skip_whitespace=False):
    def match(data, first_non_ws):
        if skip_whitespace:
            data = data[first_non_ws:]
        if len(data) < len(pattern):
            return None
        for i, (m, p) in enumerate(zip(mask, pattern)):
            if data[i] & m != p:
                return None
        return content_type
    return match


def _html(tag):
    """Match an HTML tag case-insensitively, followed by a space or '>'."""
    def match(data, first_non_ws):
        data = data[first_non_ws:]
        if len(data) < len(tag) + 1:
            return None
        for i, b in enumerate(tag):
            db = data[i]
            if ord('A') <= b <= ord('Z'):
                db &= 0xDF
            if db != b:
                return None
        if data[len(tag)] not in b' >':
            return None
        return 'text/html; charset=utf-8'
    return match


def _mp4(data, first_non_ws):
    if len(data) < 12:
        return None
    box_size = struct.unpack('>I', data[:4])[0]
    if len(data) < box_size or box_size % 4 != 0:
        return None
    if data[4:8] != b'ftyp':
        return None
    for start in range(8, box_size, 4):
        if start == 12:
            # Bytes 12-15 hold the major brand version
            continue
        if data[start:start + 3] == b'mp4':
            return 'video/mp4'
    return None


def _text(data, first_non_ws):
    for b in data[first_non_ws:]:
        if b in BINARY_BYTES:
            return None
    return TEXT_TYPE


SIGNATURES = [
    _html(b'<!DOCTYPE HTML'),
    _html(b'<HTML'),
    _html(b'<HEAD'),
    _html(b'<SCRIPT'),
    _html(b'<IFRAME'),
    _html(b'<H1'),
    _html(b'<DIV'),
    _html(b'<FONT'),
    _html(b'<TABLE'),
    _html(b'<A'),
    _html(b'<STYLE'),
    _html(b'<TITLE'),
    _html(b'<B'),
    _html(b'<BODY'),
    _html(b'<BR'),
    _html(b'<P'),
    _html(b'<!--'),
    _masked(b'\xff\xff\xff\xff\xff', b'<?xml', 'text/xml; charset=utf-8', skip_whitespace=True),
    _exact(b'%PDF-', 'application/pdf'),
    _exact(b'%!PS-Adobe-', 'application/postscript'),

    # Byte order marks
    _masked(b'\xff\xff\x00\x00', b'\xfe\xff\x00\x00', 'text/plain; charset=utf-16be'),
    _masked(b'\xff\xff\x00\x00', b'\xff\xfe\x00\x00', 'text/plain; charset=utf-16le'),
    _masked(b'\xff\xff\xff\x00', b'\xef\xbb\xbf\x00', TEXT_TYPE),

    # Images
    _exact(b'\x00\x00\x01\x00', 'image/x-icon'),
    _exact(b'\x00\x00\x02\x00', 'image/x-icon'),
    _exact(b'BM', 'image/bmp'),
    _exact(b'GIF87a', 'image/gif'),
    _exact(b'GIF89a', 'image/gif'),
    _masked(b'\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff\xff\xff',
            b'RIFF\x00\x00\x00\x00WEBPVP', 'image/webp'),
    _exact(b'\x89PNG\x0d\x0a\x1a\x0a', 'image/png'),
    _exact(b'\xff\xd8\xff', 'image/jpeg'),

    # Audio and video
    _masked(b'\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff',
            b'FORM\x00\x00\x00\x00AIFF', 'audio/aiff'),
    _exact(b'ID3', 'audio/mpeg'),
    _exact(b'OggS\x00', 'application/ogg'),
    _exact(b'MThd\x00\x00\x00\x06', 'audio/midi'),
    _masked(b'\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff',
            b'RIFF\x00\x00\x00\x00AVI ', 'video/avi'),
    _masked(b'\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff',
            b'RIFF\x00\x00\x00\x00WAVE', 'audio/wave'),
    _mp4,
    _exact(b'\x1a\x45\xdf\xa3', 'video/webm'),

    # Fonts
    _masked(b'\x00' * 34 + b'\xff\xff', b'\x00' * 34 + b'LP', 'application/vnd.ms-fontobject'),
    _exact(b'\x00\x01\x00\x00', 'font/ttf'),
    _exact(b'OTTO', 'font/otf'),
    _exact(b'ttcf', 'font/collection'),
    _exact(b'wOFF', 'font/woff'),
    _exact(b'wOF2', 'font/woff2'),

    # Archives
    _exact(b'\x1f\x8b\x08', 'application/x-gzip'),
    _exact(b'PK\x03\x04', 'application/zip'),
    _exact(b'Rar!\x1a\x07\x00', 'application/x-rar-compressed'),
    _exact(b'Rar!\x1a\x07\x01\x00', 'application/x-rar-compressed'),
    _exact(b'\x00asm', 'application/wasm'),

    _text,
]


def detect_content_type(data):
    """
    Guess the MIME type of a byte string.

    Only the first 512 bytes are considered. Always returns a valid MIME
    type, 'application/octet-stream' when nothing more specific matches.

    Args:
        data: File content (bytes)

    Returns:
        str: MIME type
    """
    data = bytes(data[:SNIFF_LENGTH])

    first_non_ws = 0
    while first_non_ws < len(data) and data[first_non_ws] in WHITESPACE:
        first_non_ws += 1

    for signature in SIGNATURES:
        content_type = signature(data, first_non_ws)
        if content_type:
            return content_type
    return DEFAULT_TYPE
