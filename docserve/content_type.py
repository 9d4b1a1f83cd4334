#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Content-type resolution for docserve.

Types are looked up by file extension first, then in the mimetypes registry,
and finally sniffed from the file content. Whatever is found for an
extension is remembered and reused for every later file with the same
extension.

Known limitation: the memo is keyed by extension only, so if one tree holds
files of different types under the same extension, all of them get the type
of whichever was resolved first.
"""

import os
import mimetypes

from .sniff import detect_content_type, DEFAULT_TYPE, SNIFF_LENGTH

STATIC_TYPES = {
    '.js': 'text/javascript; charset=utf-8',
    '.css': 'text/css; charset=utf-8',
    '.html': 'text/html; charset=utf-8',
    '.svg': 'image/svg+xml',
    '.ico': 'image/x-icon',
}

# mimetypes reports these suffixes as encodings rather than types
ENCODING_TYPES = {
    'gzip': 'application/gzip',
    'bzip2': 'application/x-bzip2',
    'xz': 'application/x-xz',
    'compress': 'application/x-compress',
    'br': 'application/x-brotli',
}


class ContentTypeResolver:
    """
    Resolves and memoizes content types per file extension.

    Safe to share between request threads: the memo only ever gains keys
    through dict.setdefault, so concurrent resolutions of one extension keep
    a single value.
    """

    def __init__(self):
        self.types = dict(STATIC_TYPES)

    def resolve(self, path, content):
        """
        Determine the content type of a file.

        Args:
            path: Path of the file, only its extension is used
            content: File content, only the first 512 bytes are inspected

        Returns:
            str: MIME type, never empty
        """
        ext = os.path.splitext(path)[1]

        if ext:
            known = self.types.get(ext)
            if known:
                return known

        content_type = self._guess_from_registry(ext)
        if not content_type:
            content_type = detect_content_type(content[:SNIFF_LENGTH])

        if ext and content_type != DEFAULT_TYPE:
            content_type = self.types.setdefault(ext, content_type)

        return content_type

    def _guess_from_registry(self, ext):
        if not ext:
            return None
        content_type, encoding = mimetypes.guess_type('file' + ext, strict=False)
        if content_type is None and encoding:
            content_type = (mimetypes.types_map.get(ext) or mimetypes.types_map.get(ext.lower())
                            or ENCODING_TYPES.get(encoding))
        # The registry's catch-all says nothing about the content
        if content_type == DEFAULT_TYPE:
            return None
        return content_type

    def __contains__(self, ext):
        return ext in self.types

    def __len__(self):
        return len(self.types)


mimetypes.init()
