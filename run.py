#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
docserve entry point
--------------------
Serve a directory over HTTP:

    docserve ./public -p 8080 --cache
"""

import sys

from docserve.config import ServerConfig
from docserve.server import WebServer
from docserve.utils import setup_logging


def main(argv=None):
    """
    Main entry point for the server.

    Configuration and pre-cache errors are not caught: the process must not
    start serving with a broken setup.
    """
    config = ServerConfig.from_args(argv)

    setup_logging(
        log_level=config.log_level,
        log_file=config.log_file,
        max_size=config.log_max_size,
        backup_count=config.log_backup_count,
        use_colored_logging=config.colored_logging
    )

    server = WebServer(config)
    server.install_signal_handlers()

    if not server.start():
        return 1

    try:
        server.wait_for_shutdown()
    finally:
        server.shutdown()

    return 0


if __name__ == '__main__':
    sys.exit(main())
