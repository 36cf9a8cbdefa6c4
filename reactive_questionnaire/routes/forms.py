"""Form session endpoints.

Implements:
- POST /forms                                     create a live form session
- GET /forms/{form_id}                            current tree view
- PUT /forms/{form_id}/items/{link_id}/answer     write one node's answer
- GET /forms/{form_id}/response                   QuestionnaireResponse projection
- DELETE /forms/{form_id}                         drop the session
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Query, Request, Response
from pydantic import ValidationError as PydanticValidationError

from reactive_questionnaire.http.problem import problem_response
from reactive_questionnaire.logic.form_store import FormStore
from reactive_questionnaire.logic.form_view_builder import assemble_form_view
from reactive_questionnaire.logic.oracle import ExpressionError
from reactive_questionnaire.logic.problem_factory import (
    problem_answer_calculated,
    problem_definition_invalid,
    problem_expression_failed,
    problem_form_not_found,
    problem_item_not_found,
)
from reactive_questionnaire.logic.questionnaire_response import ReactiveQuestionnaireResponse
from reactive_questionnaire.models.form_views import AnswerWrite, CreateFormRequest

router = APIRouter()
logger = logging.getLogger(__name__)


def _store(request: Request) -> FormStore:
    return request.app.state.store


@router.post("/forms", status_code=201, summary="Create a live form session")
def create_form(payload: CreateFormRequest, request: Request):
    config = request.app.state.config
    try:
        form = ReactiveQuestionnaireResponse(
            payload.questionnaire,
            payload.response,
            oracle=request.app.state.oracle,
            default_status=config.response.default_status,
        )
    except PydanticValidationError as e:
        errors = e.errors(include_url=False, include_context=False, include_input=False)
        return problem_response(problem_definition_invalid(errors))

    store = _store(request)
    form_id = store.add(form)
    try:
        view = assemble_form_view(form_id, form)
    except ExpressionError as e:
        store.remove(form_id)
        return problem_response(problem_expression_failed(str(e)))
    return {"form_id": form_id, "form": view.model_dump()}


@router.get("/forms/{form_id}", summary="Get the current form view")
def get_form(form_id: str, request: Request):
    with _store(request).checkout(form_id) as form:
        if form is None:
            return problem_response(problem_form_not_found(form_id))
        try:
            return assemble_form_view(form_id, form).model_dump()
        except ExpressionError as e:
            return problem_response(problem_expression_failed(str(e)))


@router.put("/forms/{form_id}/items/{link_id}/answer", summary="Write an item's answer")
def put_answer(
    form_id: str,
    link_id: str,
    payload: AnswerWrite,
    request: Request,
    instance: int = Query(default=0, ge=0),
):
    with _store(request).checkout(form_id) as form:
        if form is None:
            return problem_response(problem_form_not_found(form_id))
        items = form.get_items(link_id)
        if instance >= len(items):
            return problem_response(problem_item_not_found(link_id, instance))
        item = items[instance]
        if item.is_calculated:
            return problem_response(problem_answer_calculated(link_id))

        previous = item.answer
        item.set_answer(payload.answer)
        try:
            view = assemble_form_view(form_id, form)
        except ExpressionError as e:
            # A write that leaves a formula failing is not kept.
            item.set_answer(previous)
            logger.info(
                "answer_rejected form_id=%s link_id=%s instance=%s error=%s",
                form_id,
                link_id,
                instance,
                e,
            )
            return problem_response(problem_expression_failed(str(e)))
        logger.info(
            "answer_written form_id=%s link_id=%s instance=%s count=%s",
            form_id,
            link_id,
            instance,
            None if payload.answer is None else len(payload.answer),
        )
        return view.model_dump()


@router.get("/forms/{form_id}/response", summary="Project the form to a QuestionnaireResponse")
def get_response(form_id: str, request: Request):
    with _store(request).checkout(form_id) as form:
        if form is None:
            return problem_response(problem_form_not_found(form_id))
        try:
            return form.to_fhir()
        except ExpressionError as e:
            return problem_response(problem_expression_failed(str(e)))


@router.delete("/forms/{form_id}", status_code=204, summary="Delete a form session")
def delete_form(form_id: str, request: Request):
    if not _store(request).remove(form_id):
        return problem_response(problem_form_not_found(form_id))
    return Response(status_code=204)
