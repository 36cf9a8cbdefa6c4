"""Pydantic models for the form HTTP request and response bodies."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from reactive_questionnaire.models.answer_value import AnswerValue


class AnswerOptionView(BaseModel):
    value: Dict[str, Any]
    display: str
    enabled: bool
    initial_selected: bool = False


class ItemView(BaseModel):
    link_id: str
    id: str | None = None
    text: str = ""
    type: str
    enabled: bool
    calculated: bool = False
    # None means unset; [] means explicitly empty
    answer: Optional[List[Dict[str, Any]]] = None
    answer_options: List[AnswerOptionView] = Field(default_factory=list)
    items: List["ItemView"] = Field(default_factory=list)


class FormView(BaseModel):
    form_id: str
    questionnaire: str | None = None
    status: str
    items: List[ItemView] = Field(default_factory=list)


class CreateFormRequest(BaseModel):
    """Body of POST /forms: wire-shape Questionnaire plus optional response."""

    questionnaire: Dict[str, Any]
    response: Optional[Dict[str, Any]] = None


class CreateFormResult(BaseModel):
    form_id: str
    form: FormView


class AnswerWrite(BaseModel):
    answer: Optional[List[AnswerValue]] = None


ItemView.model_rebuild()


__all__ = [
    "AnswerOptionView",
    "ItemView",
    "FormView",
    "CreateFormRequest",
    "CreateFormResult",
    "AnswerWrite",
]
