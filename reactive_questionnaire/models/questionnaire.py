"""Pydantic models for the Questionnaire (definition) resource.

Only the subset of FHIR R4 needed to hydrate a live response is modelled.
Unknown fields are ignored. Required fields (``linkId`` and ``type`` on every
item) are enforced so a structurally invalid definition is rejected before any
node is built.
"""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import Field, field_validator

from reactive_questionnaire.models.answer_value import AnswerValue, Coding, FhirModel, Quantity
from reactive_questionnaire.models.item_type import ITEM_TYPES

EnableWhenOperator = Literal["exists", "=", "!=", ">", "<", ">=", "<="]
EnableBehavior = Literal["all", "any"]


class Expression(FhirModel):
    language: str
    expression: str
    name: Optional[str] = None
    description: Optional[str] = None


class Extension(FhirModel):
    url: str
    value_expression: Optional[Expression] = None
    value_string: Optional[str] = None
    value_boolean: Optional[bool] = None
    value_decimal: Optional[float] = None
    value_integer: Optional[int] = None
    value_coding: Optional[Coding] = None
    extension: Optional[List["Extension"]] = None


class EnableWhen(FhirModel):
    question: str
    operator: EnableWhenOperator
    answer_boolean: Optional[bool] = None
    answer_decimal: Optional[float] = None
    answer_integer: Optional[int] = None
    answer_date: Optional[str] = None
    answer_date_time: Optional[str] = None
    answer_time: Optional[str] = None
    answer_string: Optional[str] = None
    answer_coding: Optional[Coding] = None
    answer_quantity: Optional[Quantity] = None


class AnswerOption(AnswerValue):
    initial_selected: Optional[bool] = None


class QuestionnaireItem(FhirModel):
    link_id: str = Field(min_length=1)
    text: Optional[str] = None
    type: str
    required: Optional[bool] = None
    read_only: Optional[bool] = None
    repeats: Optional[bool] = None
    enable_when: Optional[List[EnableWhen]] = None
    enable_behavior: Optional[EnableBehavior] = None
    answer_option: Optional[List[AnswerOption]] = None
    item: Optional[List["QuestionnaireItem"]] = None
    extension: Optional[List[Extension]] = None

    @field_validator("type")
    @classmethod
    def type_must_be_known(cls, v: str) -> str:
        if v not in ITEM_TYPES:
            raise ValueError(f"item type must be one of {sorted(ITEM_TYPES)}")
        return v


class Questionnaire(FhirModel):
    resource_type: Literal["Questionnaire"] = "Questionnaire"
    id: Optional[str] = None
    url: Optional[str] = None
    status: Optional[str] = None
    title: Optional[str] = None
    item: Optional[List[QuestionnaireItem]] = None


Extension.model_rebuild()
QuestionnaireItem.model_rebuild()


__all__ = [
    "EnableWhenOperator",
    "EnableBehavior",
    "Expression",
    "Extension",
    "EnableWhen",
    "AnswerOption",
    "QuestionnaireItem",
    "Questionnaire",
]
