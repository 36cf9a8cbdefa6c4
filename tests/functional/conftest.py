"""Functional test fixtures.

Wire-shape builders live in ``fhir_builders`` so test modules can import them
directly; this file only provides fixtures.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from reactive_questionnaire.config import AppConfig
from reactive_questionnaire.logic.json_logic_oracle import JsonLogicOracle
from reactive_questionnaire.main import create_app


@pytest.fixture
def json_logic_oracle() -> JsonLogicOracle:
    return JsonLogicOracle(cache_size=32)


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig()


@pytest.fixture
def client(app_config: AppConfig) -> TestClient:
    return TestClient(create_app(app_config))
