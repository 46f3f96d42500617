"""
Logging configuration
"""
import logging
import sys
from bhojnalay.config import get_settings

settings = get_settings()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _log_level() -> int:
    return logging.DEBUG if settings.DEBUG else logging.INFO


def configure_logging() -> None:
    """Attach a stdout handler to the package logger (idempotent)"""
    root = logging.getLogger("bhojnalay")
    if not any(getattr(h, "_bhojnalay", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._bhojnalay = True
        root.addHandler(handler)
    root.setLevel(_log_level())


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the package hierarchy"""
    if not name.startswith("bhojnalay"):
        name = f"bhojnalay.{name}"
    logger = logging.getLogger(name)
    logger.setLevel(_log_level())
    return logger
