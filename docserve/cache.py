#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
In-memory content cache for docserve.

Entries are never evicted and never expire. The cache is meant for small to
medium sites that fit in memory as a whole.
"""

import logging
from collections import namedtuple

CacheEntry = namedtuple('CacheEntry', ['content', 'content_type'])


class ContentCache:
    """
    Maps absolute file paths to CacheEntry tuples.

    Lookups and stores are single dict operations and need no lock, so any
    number of request threads can use the cache at once. When two threads
    store the same path, the last one wins; both read the same bytes.
    """

    def __init__(self):
        self._entries = {}
        self.logger = logging.getLogger('ContentCache')
        self.hits = 0
        self.misses = 0

    def lookup(self, path):
        """
        Get the entry for a path.

        Args:
            path: Absolute file path

        Returns:
            CacheEntry or None if the path is not cached
        """
        entry = self._entries.get(path)
        # Counters are approximate under concurrent lookups
        if entry is None:
            self.misses += 1
        else:
            self.hits += 1
        return entry

    def store(self, path, entry):
        """
        Insert or replace the entry for a path.

        Args:
            path: Absolute file path
            entry: CacheEntry to store
        """
        self._entries[path] = entry
        self.logger.debug(f"Added to cache: {path}")

    def clear(self):
        self._entries.clear()
        self.logger.info("Cache cleared")

    def total_bytes(self):
        return sum(len(entry.content) for entry in list(self._entries.values()))

    def stats(self):
        """
        Return cache statistics.

        Returns:
            dict: Entry count, cached bytes, hits and misses
        """
        return {
            'entries': len(self._entries),
            'bytes': self.total_bytes(),
            'hits': self.hits,
            'misses': self.misses
        }

    def __contains__(self, path):
        return path in self._entries

    def __len__(self):
        return len(self._entries)
