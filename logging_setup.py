"""
Application logging setup.

Adds a RotatingFileHandler and a stdout handler to the root, Flask and
Werkzeug loggers, and logs request context for unhandled exceptions.

Usage:
    from logging_setup import setup_logging
    setup_logging(app)
"""
from __future__ import annotations

import logging
import os
import sys
from logging import Logger
from logging.handlers import RotatingFileHandler
from typing import Optional

from flask import got_request_exception

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'


def _has_handler(logger: Logger, cls, filename: Optional[str] = None) -> bool:
    for h in logger.handlers:
        if not isinstance(h, cls):
            continue
        if filename is None:
            return True
        if getattr(h, 'baseFilename', '') == os.path.abspath(filename):
            return True
    return False


def setup_logging(app=None,
                  log_dir: Optional[str] = None,
                  log_file: str = 'bookkeep.log',
                  level: Optional[int] = None) -> Logger:
    """Configure stdout + rotating file logging.

    Idempotent: safe to call once per app instance (tests create several)
    without duplicating handlers.
    """
    if app is not None:
        log_dir = log_dir or app.config.get('LOG_DIR')
        if level is None:
            level = logging.getLevelName(app.config.get('LOG_LEVEL', 'INFO'))
    log_dir = log_dir or 'logs'
    if not isinstance(level, int):
        level = logging.INFO

    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, log_file)
    fmt = logging.Formatter(LOG_FORMAT)

    root = logging.getLogger()
    root.setLevel(level)

    # File handlers are StreamHandlers too; only count console ones here
    has_console = any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        for h in root.handlers
    )
    if not has_console:
        ch = logging.StreamHandler(sys.stdout)
        ch.setLevel(level)
        ch.setFormatter(fmt)
        root.addHandler(ch)

    if not _has_handler(root, RotatingFileHandler, filename=log_path):
        fh = RotatingFileHandler(log_path, maxBytes=5 * 1024 * 1024, backupCount=3, encoding='utf-8')
        fh.setLevel(level)
        fh.setFormatter(fmt)
        root.addHandler(fh)

    # Make werkzeug (Flask dev server) logs go through root as well
    werk = logging.getLogger('werkzeug')
    werk.setLevel(logging.INFO)
    werk.propagate = True

    if app is not None:
        app.logger.setLevel(level)

        def _log_exception(sender, exception, **extra):
            from flask import request
            sender.logger.error(
                'Request error: %s %s (remote=%s)',
                request.method, request.path, request.remote_addr,
                exc_info=exception,
            )

        # weak=False keeps the closure alive for the app's lifetime
        got_request_exception.connect(_log_exception, app, weak=False)

    logging.getLogger(__name__).info('Logging initialized -> %s', log_path)
    return root
