#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
docserve
--------
A small HTTP file server for a single directory tree.

Features:
- Static file serving confined to one served root
- Default-document fallback for missing or invalid paths
- Content-type detection (extension table, mimetypes, content sniffing)
- Optional in-memory content cache, optionally pre-loaded at startup
"""

__version__ = '1.0.0'

from .server import WebServer
from .config import ServerConfig, ConfigurationError
from .handler import RequestHandler
from .cache import ContentCache, CacheEntry
from .content_type import ContentTypeResolver
from .resolver import PathResolver
from .precache import load_tree, PrecacheError
from .utils import setup_logging

__all__ = [
    'WebServer', 'ServerConfig', 'ConfigurationError', 'RequestHandler',
    'ContentCache', 'CacheEntry', 'ContentTypeResolver', 'PathResolver',
    'load_tree', 'PrecacheError', 'setup_logging'
]
