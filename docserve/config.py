#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Configuration Module for docserve
---------------------------------
Handles loading server configuration from various sources:
- Default configuration
- Configuration file (JSON)
- Command-line arguments

A ServerConfig is built once at startup and handed to the components that
need it. It exposes read-only accessors only.
"""

import os
import sys
import json
import logging
import argparse


class ConfigurationError(Exception):
    """Raised when the server cannot start with the given configuration."""


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on invalid arguments."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser():
    """
    Build the command line parser.

    Returns:
        argparse.ArgumentParser: Parser for the docserve command line
    """
    parser = _ArgumentParser(prog='docserve', description='Serve a directory over HTTP')

    parser.add_argument('directory', metavar='DIR', help='Directory to host')
    parser.add_argument('-d', '--default-doc', type=str,
                        help='On 404, return this document (default: index.html)')
    parser.add_argument('-p', '--port', type=int, help='Port to listen on (default: 80)')
    parser.add_argument('-c', '--cache', action='store_true', help='Enable memcache')
    parser.add_argument('-l', '--load', action='store_true',
                        help='Load all files into the cache before serving (enables memcache)')

    parser.add_argument('-H', '--host', type=str, help='Host address to bind to')
    parser.add_argument('--config', type=str, help='Path to a JSON configuration file')
    parser.add_argument('--log-level', type=str, choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help='Logging level')
    parser.add_argument('--log-file', type=str, help='Path to log file')
    parser.add_argument('--no-color', action='store_true', help='Disable colored logging')

    return parser


class ServerConfig:
    """
    Server configuration.

    Values are taken from, highest precedence first:
    1. Keyword overrides (usually the command line)
    2. Configuration file
    3. Default values
    """

    DEFAULT_CONFIG = {
        "host": "",
        "port": 80,
        "root_directory": ".",
        "default_doc": "index.html",
        "enable_cache": False,
        "load_cache": False,
        "log_level": "INFO",
        "log_file": None,
        "log_max_size": 10485760,  # 10 MB
        "log_backup_count": 5,
        "colored_logging": True,
        "connection_queue": 128,
        "max_request_size": 65536
    }

    def __init__(self, config_file=None, **kwargs):
        """
        Initialize the configuration with values from file and kwargs.

        Args:
            config_file: Path to a JSON configuration file
            **kwargs: Configuration values that override file values
        """
        self._config = self.DEFAULT_CONFIG.copy()
        self.logger = logging.getLogger(__name__)

        if config_file:
            self._config.update(self._load_file(config_file))

        for key, value in kwargs.items():
            if value is not None:
                self._config[key] = value

        self._root = os.path.abspath(self._config['root_directory'])
        self._default_doc_path = os.path.normpath(os.path.join(self._root, self.default_doc.lstrip('/')))

    def _load_file(self, config_path):
        try:
            with open(config_path, 'r') as f:
                file_config = json.load(f)
        except (OSError, ValueError) as e:
            self.logger.error(f"Error loading configuration from {config_path}: {e}")
            raise ConfigurationError(f"unable to load configuration file {config_path}: {e}") from e

        if not isinstance(file_config, dict):
            raise ConfigurationError(f"configuration file {config_path} must contain a JSON object")

        self.logger.info(f"Loaded configuration from {config_path}")
        return file_config

    @classmethod
    def from_args(cls, args=None):
        """
        Build a configuration from command line arguments.

        Args:
            args: Argument list to parse (default: sys.argv[1:])

        Returns:
            ServerConfig: Configuration instance
        """
        parsed = build_parser().parse_args(args)

        overrides = {
            'root_directory': parsed.directory,
            'default_doc': parsed.default_doc,
            'port': parsed.port,
            'host': parsed.host,
            'log_level': parsed.log_level,
            'log_file': parsed.log_file,
        }
        # Flags only override when given, so a config file can still enable them
        if parsed.cache:
            overrides['enable_cache'] = True
        if parsed.load:
            overrides['load_cache'] = True
        if parsed.no_color:
            overrides['colored_logging'] = False

        return cls(config_file=parsed.config, **overrides)

    def validate(self):
        """
        Check the startup invariants.

        Raises:
            ConfigurationError: If the served directory is missing or the
                default document lies outside of it
        """
        if not os.path.isdir(self._root):
            raise ConfigurationError(f"{self._root} is not a directory")
        if not self._default_doc_path.startswith(self._root.rstrip(os.sep) + os.sep):
            raise ConfigurationError("default doc is not in the directory")
        return self

    def get(self, key, default=None):
        return self._config.get(key, default)

    @property
    def host(self):
        return self.get('host')

    @property
    def port(self):
        return self.get('port')

    @property
    def root_directory(self):
        return self._root

    @property
    def default_doc(self):
        return self.get('default_doc')

    @property
    def default_doc_path(self):
        return self._default_doc_path

    @property
    def enable_cache(self):
        # Pre-loading the cache only makes sense if we serve from it
        return bool(self.get('enable_cache') or self.get('load_cache'))

    @property
    def load_cache(self):
        return bool(self.get('load_cache'))

    @property
    def log_level(self):
        return self.get('log_level')

    @property
    def log_file(self):
        return self.get('log_file')

    @property
    def log_max_size(self):
        return self.get('log_max_size')

    @property
    def log_backup_count(self):
        return self.get('log_backup_count')

    @property
    def colored_logging(self):
        return self.get('colored_logging')

    @property
    def connection_queue(self):
        return self.get('connection_queue')

    @property
    def max_request_size(self):
        return self.get('max_request_size')
