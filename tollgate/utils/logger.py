# tollgate/utils/logger.py
"""
Centralised logging configuration for the entire application.
Logs to console and to a rotating tollgate.log next to the ledger files
(<DATA_DIR>/logs/).

This is the operational log. The auditable toll ledger (transaction CSV +
error log) is written by services/ledger.py, never through logging.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from tollgate.config import settings

LOG_LEVEL = settings.LOG_LEVEL.upper()
LOG_DIR = os.path.join(settings.DATA_DIR, "logs")
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Third-party loggers that drown out toll events at INFO
QUIET_LOGGERS = ("sqlalchemy.engine", "uvicorn.access", "httpx")

_configured = False


def _configure_root_logger():
    global _configured
    if _configured:
        return
    _configured = True

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    root = logging.getLogger()
    root.setLevel(LOG_LEVEL)

    console = logging.StreamHandler()
    console.setFormatter(fmt)
    root.addHandler(console)

    try:
        os.makedirs(LOG_DIR, exist_ok=True)
        # keeps last 10 × 5MB files
        file_handler = RotatingFileHandler(
            filename=os.path.join(LOG_DIR, "tollgate.log"),
            maxBytes=5 * 1024 * 1024,
            backupCount=10,
            encoding="utf-8",
        )
    except OSError as e:
        root.warning(f"File logging disabled, cannot write to {LOG_DIR}: {e}")
    else:
        file_handler.setFormatter(fmt)
        root.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a named logger. Call this at the top of every module."""
    _configure_root_logger()
    return logging.getLogger(name)
