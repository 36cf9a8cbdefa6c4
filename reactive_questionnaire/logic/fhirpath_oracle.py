"""FHIRPath adapter for the expression oracle.

fhirpathpy evaluates over plain dicts, so every evaluation builds a snapshot
of the live response first. Reading answers while the snapshot is built is
what records them as dependencies of the evaluating cell. When the expression
names linkIds (``linkId = '...'``) only those answers are read; otherwise
every non-calculated answer is. The response is bound as ``%resource``.
"""

from __future__ import annotations

import functools
import re
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, List, Optional
import logging

from fhirpathpy import evaluate as fhirpath_evaluate
from fhirpathpy.models import models

from reactive_questionnaire.logic.oracle import ExpressionError

if TYPE_CHECKING:  # pragma: no cover
    from reactive_questionnaire.logic.questionnaire_response import ReactiveQuestionnaireResponse
    from reactive_questionnaire.logic.response_item import ReactiveResponseItem

logger = logging.getLogger(__name__)

DEFAULT_CACHE_SIZE = 256
FHIRPATH_LANGUAGE = "text/fhirpath"

_LINK_ID_LITERAL = re.compile(r"linkId\s*=\s*'((?:[^'\\]|\\.)*)'")


def referenced_link_ids(expression: str) -> FrozenSet[str]:
    """LinkIds compared by literal in ``expression`` (empty when none are)."""
    return frozenset(re.sub(r"\\(.)", r"\1", match) for match in _LINK_ID_LITERAL.findall(expression))


def _item_snapshot(item: "ReactiveResponseItem", wanted: Optional[FrozenSet[str]]) -> Dict[str, Any]:
    node: Dict[str, Any] = {"linkId": item.link_id}
    if item.id:
        node["id"] = item.id
    if item.text:
        node["text"] = item.text
    reads = item.link_id in wanted if wanted is not None else not item.is_calculated
    if reads:
        answers = item.answer
        if answers:
            node["answer"] = [answer.to_fhir() for answer in answers]
    children = [_item_snapshot(child, wanted) for child in item.items]
    if children:
        node["item"] = children
    return node


def response_snapshot(
    root: "ReactiveQuestionnaireResponse", wanted: Optional[FrozenSet[str]] = None
) -> Dict[str, Any]:
    resource: Dict[str, Any] = {"resourceType": root.resource_type, "status": root.status}
    if root.id:
        resource["id"] = root.id
    if root.questionnaire:
        resource["questionnaire"] = root.questionnaire
    items = [_item_snapshot(item, wanted) for item in root.items]
    if items:
        resource["item"] = items
    return resource


class FhirPathOracle:
    """Evaluate FHIRPath expressions against a live questionnaire response."""

    language = FHIRPATH_LANGUAGE

    def __init__(self, cache_size: int = DEFAULT_CACHE_SIZE, model: str = "r4") -> None:
        self._referenced = functools.lru_cache(maxsize=cache_size)(referenced_link_ids)
        self._model = models[model]

    def evaluate(
        self,
        expression: str,
        root: "ReactiveQuestionnaireResponse",
        language: Optional[str] = None,
    ) -> List[Any]:
        if language is not None and language != FHIRPATH_LANGUAGE:
            raise ExpressionError(f"unsupported expression language {language!r}")
        referenced = self._referenced(expression)
        resource = response_snapshot(root, referenced or None)
        try:
            result = fhirpath_evaluate(resource, expression, {"resource": resource}, self._model)
        except Exception as e:
            raise ExpressionError(f"expression could not be evaluated: {e}") from e
        if not result:
            logger.debug("oracle_empty_result expression=%r", expression)
            return []
        return list(result)


__all__ = ["DEFAULT_CACHE_SIZE", "FHIRPATH_LANGUAGE", "FhirPathOracle", "referenced_link_ids", "response_snapshot"]
