# app/utils/logger.py
"""
Logging setup shared by every module.
Console + rotating file under logs/ (name from settings.LOG_FILE).
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from app.config import settings

LOG_LEVEL = settings.LOG_LEVEL.upper()
LOG_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "logs")
os.makedirs(LOG_DIR, exist_ok=True)

# Third-party loggers that are noisy at INFO
QUIET_LOGGERS = ("passlib", "multipart", "sqlalchemy.engine")

_configured = False


def _configure_root_logger():
    global _configured
    if _configured:
        return
    _configured = True

    fmt = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handlers = [logging.StreamHandler()]
    # 5 × 2MB is plenty for a single-site install
    handlers.append(RotatingFileHandler(
        filename=os.path.join(LOG_DIR, settings.LOG_FILE),
        maxBytes=2 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    ))

    root = logging.getLogger()
    root.setLevel(LOG_LEVEL)
    for handler in handlers:
        handler.setLevel(LOG_LEVEL)
        handler.setFormatter(fmt)
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Named logger; call once at module top: logger = get_logger(__name__)"""
    _configure_root_logger()
    return logging.getLogger(name)
