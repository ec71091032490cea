#!/usr/bin/env python3
"""
ScanRecon - Logging setup
Copyright (C) 2026  Dorin Badea
GPLv3 License
"""

import logging
import os
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import Optional

from scanrecon.utils.constants import LOG_BACKUP_COUNT, LOG_MAX_BYTES, LOGGER_NAME

DEFAULT_LOG_DIR = "~/.scanrecon/logs"


class _NoTracebackFormatter(logging.Formatter):
    """Console output keeps to one line per record; tracebacks go to the file log."""

    def format(self, record: logging.LogRecord) -> str:
        exc_info = record.exc_info
        stack_info = record.stack_info
        record.exc_info = None
        record.stack_info = None
        try:
            return super().format(record)
        finally:
            record.exc_info = exc_info
            record.stack_info = stack_info


def setup_logging(log_dir: Optional[str] = None, *, verbose: bool = False) -> logging.Logger:
    """Configure the ScanRecon logger with a rotating file and a console handler."""
    log_dir = os.path.expanduser(log_dir or DEFAULT_LOG_DIR)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    file_handler = None
    try:
        os.makedirs(log_dir, exist_ok=True)
        log_file = os.path.join(log_dir, f"scanrecon_{datetime.now().strftime('%Y%m%d')}.log")
        fmt = logging.Formatter(
            "%(asctime)s - [%(levelname)s] - %(funcName)s:%(lineno)d - %(message)s"
        )
        file_handler = RotatingFileHandler(
            log_file, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT
        )
        file_handler.setFormatter(fmt)
        file_handler.setLevel(logging.DEBUG)
    except OSError:
        file_handler = None

    ch = logging.StreamHandler(stream=getattr(sys, "__stderr__", sys.stderr))
    ch.setLevel(logging.INFO if verbose else logging.ERROR)
    ch.setFormatter(_NoTracebackFormatter("%(levelname)s: %(message)s"))

    if not logger.handlers:
        if file_handler:
            logger.addHandler(file_handler)
        logger.addHandler(ch)
    else:
        has_file = any(isinstance(h, RotatingFileHandler) for h in logger.handlers)
        if file_handler and not has_file:
            logger.addHandler(file_handler)
        elif file_handler:
            file_handler.close()

    if file_handler is None:
        logger.warning("File logging disabled (permission or path issue)")
    logger.info("=" * 60)
    logger.info("ScanRecon session start")
    logger.info("User: %s", os.getenv("SUDO_USER", os.getenv("USER", "unknown")))
    logger.info("PID: %s", os.getpid())
    return logger
