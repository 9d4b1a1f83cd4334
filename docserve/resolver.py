#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Path resolution for docserve.

Maps request URL paths onto files below the served root. Anything that
would leave the root is replaced by the default document.
"""

import os

from .config import ConfigurationError
from .utils import is_path_safe


class PathResolver:
    """
    Resolves request paths to absolute filesystem paths.

    Args:
        root: Absolute path of the served directory
        default_doc: Default document, relative to root

    Raises:
        ConfigurationError: If the default document is not below root
    """

    def __init__(self, root, default_doc='index.html'):
        self.root = os.path.abspath(root)
        self.default_doc = default_doc
        self.default_path = os.path.normpath(os.path.join(self.root, default_doc.lstrip('/')))
        if self.default_path == self.root or not is_path_safe(self.root, self.default_path):
            raise ConfigurationError("default doc is not in the directory")

    def resolve(self, url_path):
        """
        Resolve a request path to an absolute path inside the root.

        Args:
            url_path: Decoded URL path, e.g. '/css/site.css'

        Returns:
            str: Absolute path, guaranteed to be inside the root
        """
        path = url_path
        if path == '/':
            path = self.default_doc

        full_path = os.path.normpath(os.path.join(self.root, path.lstrip('/')))
        if not is_path_safe(self.root, full_path):
            return self.default_path
        return full_path

    def candidates(self, url_path):
        """
        Yield the paths to try for a request, in order.

        The resolved path comes first, followed by the default document if
        it differs. There is never more than one fallback.
        """
        full_path = self.resolve(url_path)
        yield full_path
        if full_path != self.default_path:
            yield self.default_path

    def relative(self, full_path):
        """Return the path relative to the root, with a leading '/'."""
        if full_path == self.root:
            return '/'
        return full_path[len(self.root.rstrip(os.sep)):].replace(os.sep, '/')
