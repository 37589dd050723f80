"""
Logging setup for the Family Dinner package.

``setup_logging`` installs one console handler on the root logger (plus a
DEBUG file handler when file logging is on) and applies per-module levels, so
SQL and driver chatter stays out of application logs unless asked for.

Formats:
- simple: level, logger and message
- detailed: timestamp and call site, the default
- json: one JSON object per line
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

LOG_FILE_NAME = "family_dinner.log"

SIMPLE_FORMAT = "%(levelname)-8s %(name)s: %(message)s"

DETAILED_FORMAT = "%(asctime)s %(levelname)-8s %(name)s [%(module)s.%(funcName)s:%(lineno)d] %(message)s"

JSON_FORMAT = (
    '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", '
    '"where": "%(module)s.%(funcName)s:%(lineno)d", "message": "%(message)s"}'
)

LOG_FORMATS = {
    "simple": SIMPLE_FORMAT,
    "detailed": DETAILED_FORMAT,
    "json": JSON_FORMAT,
}

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

MODULE_LOG_LEVELS = {
    "family_dinner": "DEBUG",
    "family_dinner.core.database": "INFO",
    "family_dinner.core.database.live": "INFO",
    "family_dinner.ui": "INFO",
    # SQL echo goes through sqlalchemy.engine; DatabaseConfig.echo turns it on
    "sqlalchemy": "WARNING",
    "sqlalchemy.engine": "WARNING",
    "sqlalchemy.pool": "WARNING",
    "aiosqlite": "WARNING",
    "asyncio": "WARNING",
}


def _configured_defaults() -> Dict[str, Any]:
    """Defaults from ``Settings``, or from the raw environment if settings cannot load."""
    try:
        from family_dinner.core.config import settings

        return {
            "level": settings.log_level,
            "format": settings.log_format,
            "file_dir": settings.log_file_dir,
            "enable_file": settings.enable_file_logging,
        }
    except Exception:
        return {
            "level": os.getenv("FAMILY_DINNER_LOG_LEVEL", "INFO"),
            "format": os.getenv("FAMILY_DINNER_LOG_FORMAT", "detailed"),
            "file_dir": os.getenv("FAMILY_DINNER_LOG_FILE_DIR", "logs"),
            "enable_file": os.getenv("FAMILY_DINNER_ENABLE_FILE_LOGGING", "").lower() in ("1", "true", "yes"),
        }


def _handler(handler: logging.Handler, level: Any, formatter: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    enable_file: Optional[bool] = None,
    log_file_dir: Optional[str] = None,
) -> None:
    """
    Configure the root logger. Calling it again replaces the previous handlers.

    Args:
        log_level: Console level name, case-insensitive
        log_format: One of ``LOG_FORMATS``; unknown names fall back to detailed
        enable_file: Also write DEBUG and above to ``LOG_FILE_NAME``
        log_file_dir: Directory for the log file, created if missing

    Arguments left as None take their value from the settings.
    """
    defaults = _configured_defaults()
    level = (log_level or defaults["level"]).upper()
    fmt = log_format or defaults["format"]
    to_file = defaults["enable_file"] if enable_file is None else enable_file

    formatter = logging.Formatter(LOG_FORMATS.get(fmt, DETAILED_FORMAT), datefmt=DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for existing in list(root_logger.handlers):
        root_logger.removeHandler(existing)

    root_logger.addHandler(_handler(logging.StreamHandler(), level, formatter))
    if to_file:
        file_dir = Path(log_file_dir or defaults["file_dir"])
        file_dir.mkdir(parents=True, exist_ok=True)
        root_logger.addHandler(_handler(logging.FileHandler(file_dir / LOG_FILE_NAME), logging.DEBUG, formatter))

    for module_name, module_level in MODULE_LOG_LEVELS.items():
        logging.getLogger(module_name).setLevel(module_level)

    root_logger.info("Logging configured: level=%s format=%s file=%s", level, fmt, to_file)


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name``, normally the calling module's ``__name__``."""
    return logging.getLogger(name)
