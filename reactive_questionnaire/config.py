"""Configuration utilities for the reactive questionnaire service.

This module loads application configuration with the following rules:
- Primary source: `reactive_questionnaire.json` at the project root.
- Overrides: environment variables, then optional text files under `config/`.
- Validation: Pydantic models enforce value constraints.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


CONFIG_DIR = Path("config")
ROOT_CONFIG = Path("reactive_questionnaire.json")
logger = logging.getLogger(__name__)

RESPONSE_STATUSES = frozenset({"in-progress", "completed", "amended", "entered-in-error", "stopped"})
LOG_LEVELS = frozenset({"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"})


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        # Unreadable overrides are skipped
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


class ResponseConfig(BaseModel):
    default_status: str = Field(default="in-progress")

    @field_validator("default_status")
    @classmethod
    def status_must_be_allowed(cls, v: str) -> str:
        if v not in RESPONSE_STATUSES:
            raise ValueError(f"response.default_status must be one of {sorted(RESPONSE_STATUSES)}")
        return v


class ExpressionConfig(BaseModel):
    cache_size: int = Field(default=256, gt=0)


class StoreConfig(BaseModel):
    max_forms: int = Field(default=1000, gt=0)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")

    @field_validator("level")
    @classmethod
    def level_must_be_known(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"logging.level must be one of {sorted(LOG_LEVELS)}")
        return level


class AppConfig(BaseModel):
    response: ResponseConfig = Field(default_factory=ResponseConfig)
    expression: ExpressionConfig = Field(default_factory=ExpressionConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def load_config() -> AppConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables
    2) Text files in `config/` (optional)
    3) reactive_questionnaire.json at project root
    4) Defaults
    """

    base = _read_json_file(ROOT_CONFIG)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        return str(cur) if cur is not None else default

    default_status = _env("RQ_DEFAULT_STATUS") or _read_config_file("response.default_status") or _base("response.default_status", "in-progress")
    cache_size_text = _env("RQ_EXPRESSION_CACHE_SIZE") or _read_config_file("expression.cache_size") or _base("expression.cache_size", "256")
    max_forms_text = _env("RQ_STORE_MAX_FORMS") or _read_config_file("store.max_forms") or _base("store.max_forms", "1000")
    log_level = _env("RQ_LOG_LEVEL") or _read_config_file("logging.level") or _base("logging.level", "INFO")

    try:
        return AppConfig(
            response=ResponseConfig(default_status=str(default_status).strip()),
            expression=ExpressionConfig(cache_size=str(cache_size_text).strip()),
            store=StoreConfig(max_forms=str(max_forms_text).strip()),
            logging=LoggingConfig(level=str(log_level)),
        )
    except PydanticValidationError as e:
        logger.error("Invalid application configuration: %s", e)
        raise


__all__ = [
    "AppConfig",
    "ResponseConfig",
    "ExpressionConfig",
    "StoreConfig",
    "LoggingConfig",
    "load_config",
]
