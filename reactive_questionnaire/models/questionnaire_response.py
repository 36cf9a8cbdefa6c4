"""Pydantic models for the QuestionnaireResponse (answer record) resource."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import Field

from reactive_questionnaire.models.answer_value import AnswerValue, FhirModel


class QuestionnaireResponseAnswer(AnswerValue):
    # Nested items under an answer are accepted but not hydrated.
    item: Optional[List["QuestionnaireResponseItem"]] = None


class QuestionnaireResponseItem(FhirModel):
    link_id: str = Field(min_length=1)
    id: Optional[str] = None
    text: Optional[str] = None
    answer: Optional[List[QuestionnaireResponseAnswer]] = None
    item: Optional[List["QuestionnaireResponseItem"]] = None


class QuestionnaireResponse(FhirModel):
    resource_type: Literal["QuestionnaireResponse"] = "QuestionnaireResponse"
    id: Optional[str] = None
    status: Optional[str] = None
    questionnaire: Optional[str] = None
    item: Optional[List[QuestionnaireResponseItem]] = None


QuestionnaireResponseAnswer.model_rebuild()
QuestionnaireResponseItem.model_rebuild()


__all__ = [
    "QuestionnaireResponseAnswer",
    "QuestionnaireResponseItem",
    "QuestionnaireResponse",
]
