"""Logging configuration for the API and Celery workers.

Installs a single console handler on the root logger with ISO 8601
timestamps. Calling it more than once is harmless.
"""

import logging

from app.config import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

_HANDLER_NAME = "document-approvals-console"


def configure_logging(level: str | None = None) -> logging.Logger:
    """Configure the root logger.

    Args:
        level: Logging level name; defaults to ``settings.log_level``.

    Returns:
        The root logger.
    """
    level_upper = (level or settings.log_level).upper()
    if not hasattr(logging, level_upper):
        raise ValueError(
            f"Invalid log level: {level_upper}. "
            f"Must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL"
        )

    root = logging.getLogger()
    root.setLevel(getattr(logging, level_upper))

    if any(h.get_name() == _HANDLER_NAME for h in root.handlers):
        return root

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    root.addHandler(handler)
    return root
