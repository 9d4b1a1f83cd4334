#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Startup pre-caching for docserve.

Reads the whole served tree into the content cache before the server starts
listening. A file that cannot be read stops the server from starting.
"""

import os
import time
import logging

from .cache import CacheEntry

logger = logging.getLogger('Precache')


class PrecacheError(Exception):
    """Raised when a file or directory of the served tree cannot be read."""


def _raise_walk_error(error):
    raise error


def load_tree(root, cache, content_types):
    """
    Load every regular file below root into the cache.

    Args:
        root: Absolute path of the served directory
        cache: ContentCache to fill
        content_types: ContentTypeResolver used for every file

    Returns:
        tuple: (total bytes loaded, elapsed seconds)

    Raises:
        PrecacheError: If any file or directory cannot be read
    """
    start = time.monotonic()
    size = 0

    try:
        for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
            dirnames.sort()
            for name in sorted(filenames):
                full_path = os.path.join(dirpath, name)
                if not os.path.isfile(full_path):
                    continue

                with open(full_path, 'rb') as f:
                    raw = f.read()

                size += len(raw)
                cache.store(full_path, CacheEntry(raw, content_types.resolve(full_path, raw)))
    except OSError as e:
        logger.error(f"Unable to pre-cache {getattr(e, 'filename', None) or root}: {e}")
        raise PrecacheError(str(e)) from e

    return size, time.monotonic() - start
