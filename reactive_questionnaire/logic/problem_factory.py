"""Centralised construction of problem+json payloads for form routes.

Each helper returns an RFC 7807 dict carrying a stable ``code`` so route
modules never embed status/title literals.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional
import logging


logger = logging.getLogger(__name__)


def _problem(title: str, status: int, detail: str, code: str, **extra: Any) -> Dict[str, object]:
    problem: Dict[str, object] = {
        "title": title,
        "status": status,
        "detail": detail,
        "code": code,
    }
    problem.update(extra)
    logger.info("error_handler.handle code=%s status=%s", code, status)
    return problem


def problem_form_not_found(form_id: str) -> Dict[str, object]:
    """Return a 404 problem for an unknown form session."""
    return _problem("Not Found", 404, f"form {form_id} not found", "FORM_NOT_FOUND")


def problem_item_not_found(link_id: str, instance: int) -> Dict[str, object]:
    """Return a 404 problem for a linkId/instance pair that resolves to no item."""
    return _problem(
        "Not Found",
        404,
        f"item {link_id}[{instance}] not found",
        "ITEM_NOT_FOUND",
    )


def problem_answer_calculated(link_id: str) -> Dict[str, object]:
    """Return a 409 problem when a write targets a calculated item."""
    return _problem(
        "Conflict",
        409,
        f"item {link_id} has a calculated answer and cannot be written",
        "ANSWER_CALCULATED",
    )


def problem_definition_invalid(errors: Optional[List[Any]] = None) -> Dict[str, object]:
    """Return a 422 problem for a structurally invalid questionnaire or response."""
    return _problem(
        "Invalid Definition",
        422,
        "questionnaire or response failed validation",
        "DEFINITION_INVALID",
        errors=list(errors or []),
    )


def problem_expression_failed(detail: str) -> Dict[str, object]:
    """Return a 422 problem when a formula could not be evaluated."""
    return _problem("Expression Failed", 422, detail, "EXPRESSION_FAILED")


__all__ = [
    "problem_form_not_found",
    "problem_item_not_found",
    "problem_answer_calculated",
    "problem_definition_invalid",
    "problem_expression_failed",
]
