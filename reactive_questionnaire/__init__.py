"""Reactive model of FHIR Questionnaire / QuestionnaireResponse pairs.

The core exported here depends only on pydantic. The expression adapters and
the FastAPI application live in ``logic.json_logic_oracle``,
``logic.fhirpath_oracle`` and ``main``.
"""

from __future__ import annotations

from reactive_questionnaire.logic.cells import Cell, Computed, CyclicDependencyError, constant
from reactive_questionnaire.logic.oracle import AnswerData, ExpressionError, LanguageOracle, Oracle
from reactive_questionnaire.logic.questionnaire_response import (
    DEFAULT_STATUS,
    MissingOracle,
    ReactiveQuestionnaireResponse,
)
from reactive_questionnaire.logic.response_item import ReactiveAnswerOption, ReactiveResponseItem
from reactive_questionnaire.models.answer_value import AnswerValue, Coding, Quantity
from reactive_questionnaire.models.questionnaire import Questionnaire, QuestionnaireItem
from reactive_questionnaire.models.questionnaire_response import (
    QuestionnaireResponse,
    QuestionnaireResponseAnswer,
    QuestionnaireResponseItem,
)

__all__ = [
    "AnswerData",
    "AnswerValue",
    "Cell",
    "Coding",
    "Computed",
    "CyclicDependencyError",
    "DEFAULT_STATUS",
    "ExpressionError",
    "LanguageOracle",
    "MissingOracle",
    "Oracle",
    "Quantity",
    "Questionnaire",
    "QuestionnaireItem",
    "QuestionnaireResponse",
    "QuestionnaireResponseAnswer",
    "QuestionnaireResponseItem",
    "ReactiveAnswerOption",
    "ReactiveQuestionnaireResponse",
    "ReactiveResponseItem",
    "constant",
]
