"""FastAPI application factory for the reactive questionnaire service."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError

from reactive_questionnaire.config import AppConfig, load_config
from reactive_questionnaire.http.problem import (
    handle_http_exception,
    handle_request_validation_error,
    handle_unexpected_error,
)
from reactive_questionnaire.http.request_id import RequestIdMiddleware
from reactive_questionnaire.logging_setup import configure_logging
from reactive_questionnaire.logic.form_store import FormStore
from reactive_questionnaire.logic.fhirpath_oracle import FHIRPATH_LANGUAGE, FhirPathOracle
from reactive_questionnaire.logic.json_logic_oracle import JSON_LOGIC_LANGUAGE, JsonLogicOracle
from reactive_questionnaire.logic.oracle import LanguageOracle
from reactive_questionnaire.routes import api_router

logger = logging.getLogger(__name__)


def create_app(config: Optional[AppConfig] = None) -> FastAPI:
    """Build the application; ``config`` defaults to ``load_config()``."""
    if config is None:
        config = load_config()
    configure_logging(config.logging.level)

    app = FastAPI(title="Reactive Questionnaire")
    app.state.config = config
    app.state.store = FormStore(max_forms=config.store.max_forms)
    cache_size = config.expression.cache_size
    app.state.oracle = LanguageOracle(
        {
            JSON_LOGIC_LANGUAGE: JsonLogicOracle(cache_size=cache_size),
            FHIRPATH_LANGUAGE: FhirPathOracle(cache_size=cache_size),
        }
    )

    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(api_router, prefix="/api/v1")

    @app.get("/health")
    def health():  # pragma: no cover - trivial
        return {"status": "ok"}

    logger.info(
        "app_created max_forms=%s cache_size=%s default_status=%s",
        config.store.max_forms,
        config.expression.cache_size,
        config.response.default_status,
    )
    return app


# Intentionally do not instantiate the app at import time to prevent side effects.
__all__ = ["create_app"]
