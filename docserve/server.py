#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
docserve Server Module
----------------------
Owns the listening socket and hands every accepted connection to its own
thread. Pre-caching, when enabled, happens before the socket is bound.
"""

import socket
import threading
import time
import logging
import signal
import sys

from .cache import ContentCache
from .content_type import ContentTypeResolver
from .handler import RequestHandler
from .precache import load_tree
from .resolver import PathResolver
from .utils import human_readable_size


class WebServer:
    """
    Web server serving a single directory.

    Raises ConfigurationError from the constructor if the configuration
    breaks a startup invariant.
    """

    def __init__(self, config):
        """
        Initialize the web server.

        Args:
            config: ServerConfig instance
        """
        self.config = config.validate()
        self.logger = logging.getLogger('WebServer')

        self.resolver = PathResolver(config.root_directory, config.default_doc)
        self.content_types = ContentTypeResolver()

        if config.enable_cache:
            self.cache = ContentCache()
            self.logger.info("Content cache enabled")
        else:
            self.cache = None

        self.request_handler = RequestHandler(config, self.resolver, self.content_types, self.cache)

        self.server_socket = None
        self.is_running = False
        self._accept_thread = None

    def install_signal_handlers(self):
        """Shut down on SIGINT and SIGTERM. Must be called from the main thread."""
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

    def _signal_handler(self, sig, frame):
        self.logger.info(f"Received signal {sig}, shutting down...")
        self.shutdown()
        sys.exit(0)

    def preload(self):
        """
        Fill the cache with the whole served tree.

        Raises:
            PrecacheError: If any file cannot be read
        """
        self.logger.info(f"Pre-caching {self.config.root_directory}...")
        size, elapsed = load_tree(self.config.root_directory, self.cache, self.content_types)
        self.logger.info(f"Pre-cached {len(self.cache)} files, {human_readable_size(size)} ({elapsed:.3f}s)")
        return size, elapsed

    def start(self):
        """
        Start the web server.

        Pre-cache errors propagate; socket errors are logged and reported
        by returning False.

        Returns:
            bool: True if the server is listening
        """
        if self.is_running:
            self.logger.warning("Server is already running")
            return True

        if self.config.load_cache:
            self.preload()

        try:
            self.server_socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            self.server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self.server_socket.bind((self.config.host, self.config.port))
            self.server_socket.listen(self.config.connection_queue)
            # Lets the accept loop notice shutdown
            self.server_socket.settimeout(0.5)
        except OSError as e:
            self.logger.error(f"Error starting server on {self.config.host or '*'}:{self.config.port}: {e}")
            if self.server_socket:
                self.server_socket.close()
                self.server_socket = None
            return False

        self.is_running = True
        host, port = self.address
        self.logger.info(f"Now listening on {host or '*'}:{port}")
        self.logger.info(f"Serving files from {self.config.root_directory}")

        self._accept_thread = threading.Thread(target=self._accept_connections, name='WebServerAccept', daemon=True)
        self._accept_thread.start()
        return True

    @property
    def address(self):
        """The (host, port) the server is bound to."""
        if self.server_socket is None:
            return self.config.host, self.config.port
        return self.server_socket.getsockname()[:2]

    def shutdown(self):
        """
        Shut down the web server.

        Requests already being handled run to completion on their own
        threads.
        """
        if not self.is_running:
            return

        self.logger.info("Shutting down server...")
        self.is_running = False

        if self._accept_thread and self._accept_thread is not threading.current_thread():
            self._accept_thread.join()
        self._accept_thread = None

        if self.server_socket:
            self.server_socket.close()
            self.server_socket = None

        if self.cache is not None:
            stats = self.cache.stats()
            self.logger.info(
                f"Cache held {stats['entries']} files, {human_readable_size(stats['bytes'])} "
                f"({stats['hits']} hits, {stats['misses']} misses)"
            )

        self.logger.info("Server shutdown complete")

    def _accept_connections(self):
        while self.is_running:
            try:
                client_socket, client_address = self.server_socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if self.is_running:
                    self.logger.error(f"Error accepting connection: {e}")
                    time.sleep(0.1)
                continue

            # Client connections never time out
            client_socket.settimeout(None)
            threading.Thread(
                target=self._handle_client,
                args=(client_socket, client_address),
                daemon=True
            ).start()

    def _handle_client(self, client_socket, client_address):
        try:
            self.request_handler.handle_request(client_socket, client_address)
        finally:
            client_socket.close()

    def wait_for_shutdown(self):
        """Block until the server stops (call after start())."""
        try:
            while self.is_running:
                time.sleep(1)
        except KeyboardInterrupt:
            self.logger.info("Received keyboard interrupt, shutting down...")
            self.shutdown()
