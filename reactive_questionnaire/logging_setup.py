"""Central logging configuration for the service.

Applies one stdout handler on the root logger at the configured level so
module loggers under ``reactive_questionnaire`` need no per-module setup.
Server loggers (uvicorn) share the handler. Repeated calls are no-ops.
"""
from __future__ import annotations
import logging
from logging.config import dictConfig

PACKAGE_LOGGER = "reactive_questionnaire"
LOG_FORMAT = "%(asctime)s %(levelname)s:%(name)s:%(message)s"
_SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def build_logging_config(level: str = "INFO") -> dict:
    """Return the dictConfig payload with handler, root and package set to ``level``."""
    loggers = {name: {"level": "INFO", "handlers": ["console"], "propagate": False} for name in _SERVER_LOGGERS}
    loggers[PACKAGE_LOGGER] = {"level": level}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": {"format": LOG_FORMAT}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"level": level, "handlers": ["console"]},
        "loggers": loggers,
    }


def configure_logging(level: str = "INFO") -> None:
    """Configure application-wide logging once.

    If the root logger already has handlers, return to prevent duplicate output
    (reloaders, embedding applications and pytest's log capture all install
    their own).
    """
    root = logging.getLogger()
    if root.handlers:
        return
    dictConfig(build_logging_config(level))


__all__ = ["PACKAGE_LOGGER", "build_logging_config", "configure_logging"]
