"""Root model of a live questionnaire response.

``ReactiveQuestionnaireResponse`` validates the definition and the optional
response, hydrates the node tree once and owns two per-instance indices:

- linkId -> ordered list of nodes (repeats keep hydration order);
- id -> node (a later duplicate id silently replaces the earlier entry).

Both indices are populated during construction only and are read-only
afterwards. ``to_fhir`` projects the current cell values back into the
QuestionnaireResponse wire shape.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Union
import logging

from reactive_questionnaire.logic.hydration import hydrate_children
from reactive_questionnaire.logic.oracle import ExpressionError, Oracle
from reactive_questionnaire.logic.response_item import ReactiveResponseItem
from reactive_questionnaire.models.answer_value import AnswerValue
from reactive_questionnaire.models.questionnaire import Questionnaire
from reactive_questionnaire.models.questionnaire_response import QuestionnaireResponse

logger = logging.getLogger(__name__)

DEFAULT_STATUS = "in-progress"


class MissingOracle:
    """Placeholder oracle for definitions built without one; fails on first use."""

    def evaluate(
        self,
        expression: str,
        root: "ReactiveQuestionnaireResponse",
        language: Optional[str] = None,
    ) -> List[Any]:
        raise ExpressionError(f"no expression oracle configured to evaluate {expression!r}")


class ReactiveQuestionnaireResponse:
    resource_type = "QuestionnaireResponse"

    def __init__(
        self,
        questionnaire: Union[Questionnaire, Mapping[str, Any]],
        response: Optional[Union[QuestionnaireResponse, Mapping[str, Any]]] = None,
        oracle: Optional[Oracle] = None,
        default_status: str = DEFAULT_STATUS,
    ) -> None:
        """Validate inputs and hydrate the tree.

        Raises pydantic.ValidationError before any node is built when either
        resource is structurally invalid.
        """
        definition = Questionnaire.model_validate(questionnaire)
        data = QuestionnaireResponse.model_validate(response) if response is not None else None

        self.definition = definition
        self.id: Optional[str] = data.id if data is not None else None
        self.status: str = (data.status if data is not None else None) or default_status
        self.questionnaire: Optional[str] = (
            data.questionnaire if data is not None else None
        ) or definition.id
        self.oracle: Oracle = oracle if oracle is not None else MissingOracle()

        self._items_by_link_id: Dict[str, List[ReactiveResponseItem]] = {}
        self._item_by_id: Dict[str, ReactiveResponseItem] = {}
        self._sealed = False
        self.items: List[ReactiveResponseItem] = hydrate_children(
            definition.item or [],
            (data.item if data is not None else None) or [],
            self,
            self,
        )
        self._sealed = True
        logger.debug(
            "response_hydrated questionnaire=%s items=%s link_ids=%s",
            self.questionnaire,
            len(self.items),
            len(self._items_by_link_id),
        )

    def register_item(self, item: ReactiveResponseItem) -> None:
        """Index ``item``; only valid while the tree is being hydrated."""
        if self._sealed:
            raise RuntimeError("indices are read-only after construction")
        self._items_by_link_id.setdefault(item.link_id, []).append(item)
        if item.id:
            if item.id in self._item_by_id:
                logger.debug("duplicate_item_id id=%s link_id=%s", item.id, item.link_id)
            self._item_by_id[item.id] = item

    def get_items(self, link_id: str) -> List[ReactiveResponseItem]:
        return list(self._items_by_link_id.get(link_id, ()))

    def get_item_by_id(self, item_id: str) -> Optional[ReactiveResponseItem]:
        return self._item_by_id.get(item_id)

    def link_ids(self) -> List[str]:
        return list(self._items_by_link_id)

    def first_answers(self, link_id: str) -> Optional[List[AnswerValue]]:
        """Answers of the first node registered under ``link_id`` (None if unknown)."""
        items = self._items_by_link_id.get(link_id)
        if not items:
            return None
        return items[0].answer

    def iter_items(self) -> Iterator[ReactiveResponseItem]:
        """Yield every node depth-first, parents before children."""
        stack = list(reversed(self.items))
        while stack:
            item = stack.pop()
            yield item
            stack.extend(reversed(item.items))

    def for_each_item(self, fn: Callable[[ReactiveResponseItem], None]) -> None:
        for item in self.iter_items():
            fn(item)

    def to_fhir(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"resourceType": self.resource_type, "status": self.status}
        if self.id:
            result["id"] = self.id
        if self.questionnaire:
            result["questionnaire"] = self.questionnaire
        items = [item.to_fhir() for item in self.items]
        if items:
            result["item"] = items
        return result


__all__ = ["DEFAULT_STATUS", "MissingOracle", "ReactiveQuestionnaireResponse"]
