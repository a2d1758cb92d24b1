"""Central logging configuration for command-line use.

The library modules only create named loggers; this module attaches a
single stderr handler to the root logger when a program asks for it.
"""
from __future__ import annotations

import copy
import logging
from logging.config import dictConfig
from typing import Any, Dict

_DICT_CONFIG: Dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(asctime)s %(levelname)s:%(name)s:%(message)s",
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": "DEBUG",
            "formatter": "default",
            "stream": "ext://sys.stderr",
        }
    },
    "root": {"level": "INFO", "handlers": ["console"]},
}


def configure_logging(level: str = "INFO") -> None:
    """Configure process-wide logging once.

    If the root logger already has handlers, return to prevent duplicate
    output (pytest's capture handler, an embedding application, ...).
    """
    root = logging.getLogger()
    if root.handlers:
        return
    config = copy.deepcopy(_DICT_CONFIG)
    config["root"]["level"] = level.upper()
    dictConfig(config)
