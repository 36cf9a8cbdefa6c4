"""Form view assembly component.

Provides a single function to project a live response tree into the
``FormView`` payload, used by both GET and post-write refresh flows.
Reading the view pulls every Enabled and Answer cell, so oracle failures
surface here as ``ExpressionError``.
"""

from __future__ import annotations

from typing import List
import logging

from reactive_questionnaire.logic.questionnaire_response import ReactiveQuestionnaireResponse
from reactive_questionnaire.logic.response_item import ReactiveResponseItem
from reactive_questionnaire.models.form_views import AnswerOptionView, FormView, ItemView

logger = logging.getLogger(__name__)


def _item_view(item: ReactiveResponseItem) -> ItemView:
    answers = item.answer
    return ItemView(
        link_id=item.link_id,
        id=item.id,
        text=item.text,
        type=item.type,
        enabled=item.enabled,
        calculated=item.is_calculated,
        answer=[a.to_fhir() for a in answers] if answers is not None else None,
        answer_options=[
            AnswerOptionView(
                value=option.value.to_fhir(),
                display=option.display,
                enabled=option.enabled,
                initial_selected=option.initial_selected,
            )
            for option in item.answer_options
        ],
        items=_item_views(item.items),
    )


def _item_views(items: List[ReactiveResponseItem]) -> List[ItemView]:
    return [_item_view(item) for item in items]


def assemble_form_view(form_id: str, form: ReactiveQuestionnaireResponse) -> FormView:
    """Build the current view of ``form`` with every cell freshly read."""
    view = FormView(
        form_id=form_id,
        questionnaire=form.questionnaire,
        status=form.status,
        items=_item_views(form.items),
    )
    logger.debug("form_view_assembled form_id=%s items=%s", form_id, len(view.items))
    return view


__all__ = ["assemble_form_view"]
