#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Utility Module for docserve
---------------------------
Helper functions used throughout the server:
- Logging setup
- Path confinement checks
- Human readable sizes
"""

import os
import logging
from logging.handlers import RotatingFileHandler

import colorama
from colorama import Fore, Style

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the whole console line by level."""

    COLORS = {
        logging.DEBUG: Fore.CYAN,
        logging.INFO: Fore.GREEN,
        logging.WARNING: Fore.YELLOW,
        logging.ERROR: Fore.RED,
        logging.CRITICAL: Fore.RED + Style.BRIGHT
    }

    def __init__(self):
        super().__init__(LOG_FORMAT, datefmt=DATE_FORMAT)

    def format(self, record):
        color = self.COLORS.get(record.levelno, Fore.GREEN)
        return color + super().format(record) + Style.RESET_ALL


def setup_logging(log_level='INFO', log_file=None, max_size=10485760, backup_count=5, use_colored_logging=True):
    """
    Set up logging configuration.

    Args:
        log_level: Logging level (default: INFO)
        log_file: Log file path (default: None, console only)
        max_size: Maximum log file size in bytes (default: 10MB)
        backup_count: Number of backup logs to keep (default: 5)
        use_colored_logging: Whether to color console output (default: True)

    Returns:
        logging.Logger: Root logger instance
    """
    log_level_value = getattr(logging, str(log_level).upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level_value)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if log_file:
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=max_size,
            backupCount=backup_count
        )
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    if use_colored_logging:
        colorama.just_fix_windows_console()
        console_handler.setFormatter(ColoredFormatter())
    else:
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    root_logger.addHandler(console_handler)
    return root_logger


def is_path_safe(base_path, target_path):
    """
    Check if a path is the base directory or lies below it.

    Both paths are expected to be absolute and normalized. The comparison is
    done on whole path components, so '/srv/www2' is not inside '/srv/www'.

    Args:
        base_path: Base directory path
        target_path: Target path to check

    Returns:
        bool: True if path is safe, False otherwise
    """
    if '\x00' in target_path:
        return False
    if target_path == base_path:
        return True
    return target_path.startswith(base_path.rstrip(os.sep) + os.sep)


def human_readable_size(size):
    """
    Convert size in bytes to human readable format.

    Args:
        size: Size in bytes

    Returns:
        str: Human readable size string
    """
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size < 1024 or unit == 'TB':
            return f"{size:.1f} {unit}" if size % 1 else f"{int(size)} {unit}"
        size /= 1024
