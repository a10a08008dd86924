"""Logging settings for the linkweaver command line tool.

Library code only creates module loggers; applications (or the CLI) decide
how records are emitted by calling :func:`configure_logging`.
"""

from __future__ import annotations

import logging.config
import os
from typing import Any, Dict, Optional


def build_logging_config(log_level: Optional[str] = None) -> Dict[str, Any]:
    level = (log_level or os.getenv("LINKWEAVER_LOG_LEVEL", "INFO")).upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "plain": {
                "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "plain",
            },
        },
        "root": {
            "handlers": ["console"],
            "level": "WARNING",
        },
        "loggers": {
            "linkweaver": {
                "level": level,
            },
        },
    }


LOGGING = build_logging_config()


def configure_logging(log_level: Optional[str] = None) -> None:
    logging.config.dictConfig(build_logging_config(log_level))
