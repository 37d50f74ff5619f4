"""Logging setup shared by the API, the CLI and tests."""

import logging
import sys

from petstore.settings import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Libraries that are too chatty at INFO
_QUIET_LOGGERS = ("sqlalchemy.engine", "urllib3", "httpx")


def setup_logging(level: str | None = None) -> None:
    """
    Configure root logging once.

    Args:
        level: Log level name; defaults to LOG_LEVEL from settings
    """
    level_name = (level or get_settings().LOG_LEVEL).upper()

    root = logging.getLogger()
    root.setLevel(level_name)

    if not any(getattr(h, "_petstore", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._petstore = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
