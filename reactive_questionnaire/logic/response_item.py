"""Live response item nodes and answer-option views.

A ``ReactiveResponseItem`` pairs one definition item with (optionally) one
response item and exposes two cells:

- the Answer cell: a mutable ``Cell`` seeded from the response, or a
  ``Computed`` over the oracle when the definition carries a calculated
  expression (external writes are then ignored);
- the Enabled cell: a visibility formula, else the static enableWhen list,
  else constant true.

Nodes are built by ``hydrate_children`` which attaches child nodes and
registers each node with the root once its descendants are registered. The
``parent`` and root references are lookups only; ownership runs strictly from
parent to ``items``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Union
import logging

from reactive_questionnaire.logic.answer_coercion import to_answer_values
from reactive_questionnaire.logic.answer_compare import answer_values_match, answers_equal
from reactive_questionnaire.logic.cells import Cell, Computed, constant
from reactive_questionnaire.logic.enable_when import evaluate_enable_when
from reactive_questionnaire.logic.extensions import (
    get_answer_options_toggle_expressions,
    get_calculated_expression,
    get_enable_when_expression,
)
from reactive_questionnaire.models.answer_value import AnswerValue, Coding
from reactive_questionnaire.models.questionnaire import Expression, QuestionnaireItem
from reactive_questionnaire.models.questionnaire_response import QuestionnaireResponseItem

if TYPE_CHECKING:  # pragma: no cover
    from reactive_questionnaire.logic.questionnaire_response import ReactiveQuestionnaireResponse

logger = logging.getLogger(__name__)

AnswerInput = Union[AnswerValue, Dict[str, Any]]


def _is_true(results: List[Any]) -> bool:
    return len(results) > 0 and results[0] is True


def formula_flag(root: "ReactiveQuestionnaireResponse", expression: Expression) -> Computed[bool]:
    """Computed cell that is true only when the formula's first result is ``True``."""
    return Computed(
        lambda: _is_true(root.oracle.evaluate(expression.expression, root, language=expression.language))
    )


def coerce_answers(value: Optional[Iterable[AnswerInput]]) -> Optional[List[AnswerValue]]:
    """Validate an answer list given as models or wire dicts; None stays unset."""
    if value is None:
        return None
    return [AnswerValue.model_validate(answer).strip() for answer in value]


class ReactiveAnswerOption:
    """One selectable answer option with its (possibly shared) enabled cell."""

    def __init__(self, value: AnswerValue, initial_selected: bool, enabled: Computed[bool]) -> None:
        self.value = value
        self.initial_selected = initial_selected
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled.get()

    @property
    def enabled_cell(self) -> Computed[bool]:
        return self._enabled

    @property
    def display(self) -> str:
        return option_display(self.value)

    def __repr__(self) -> str:
        return f"ReactiveAnswerOption({self.display!r})"


def option_display(value: AnswerValue) -> str:
    """Human-readable label for an answer value."""
    if value.value_coding is not None:
        return _coding_display(value.value_coding)
    raw = value.value
    if isinstance(raw, bool):
        return "true" if raw else "false"
    if value.value_quantity is not None:
        quantity = value.value_quantity
        return " ".join(str(part) for part in (quantity.value, quantity.unit) if part is not None)
    return str(raw)


def _coding_display(coding: Coding) -> str:
    return coding.display or coding.code or ""


def build_answer_options(
    definition: QuestionnaireItem, root: "ReactiveQuestionnaireResponse"
) -> List[ReactiveAnswerOption]:
    """Build option views, sharing one enabled cell per toggle group.

    An option governed by several groups takes the first declared group;
    options governed by none share a constant-true cell.
    """
    if not definition.answer_option:
        return []
    toggles = get_answer_options_toggle_expressions(definition.extension)
    toggle_cells = [formula_flag(root, toggle.expression) for toggle in toggles]
    always_enabled = constant(True)

    options: List[ReactiveAnswerOption] = []
    for option in definition.answer_option:
        value = option.strip()
        cell = always_enabled
        for toggle, toggle_cell in zip(toggles, toggle_cells):
            if any(answer_values_match(governed, value) for governed in toggle.options):
                cell = toggle_cell
                break
        options.append(ReactiveAnswerOption(value, bool(option.initial_selected), cell))
    return options


class ReactiveResponseItem:
    def __init__(
        self,
        definition: QuestionnaireItem,
        response_item: Optional[QuestionnaireResponseItem],
        parent: Union["ReactiveResponseItem", "ReactiveQuestionnaireResponse"],
        root: "ReactiveQuestionnaireResponse",
    ) -> None:
        self.id: Optional[str] = response_item.id if response_item is not None else None
        self.link_id = definition.link_id
        self.text = definition.text or ""
        self.type = definition.type
        self.definition = definition
        self.parent = parent
        self._root = root
        self.items: List[ReactiveResponseItem] = []

        self.calculated_expression = get_calculated_expression(definition.extension)
        self.enable_when_expression = get_enable_when_expression(definition.extension)

        self._answer: Union[Cell[Optional[List[AnswerValue]]], Computed[Optional[List[AnswerValue]]]]
        if self.calculated_expression is not None:
            self._answer = Computed(self._calculate)
        else:
            initial = []
            if response_item is not None and response_item.answer:
                initial = [answer.strip() for answer in response_item.answer]
            self._answer = Cell(initial, equals=answers_equal)

        self._enabled = self._build_enabled(definition)
        self.answer_options = build_answer_options(definition, root)

    def _build_enabled(self, definition: QuestionnaireItem) -> Computed[bool]:
        root = self._root
        if self.enable_when_expression is not None:
            return formula_flag(root, self.enable_when_expression)
        if definition.enable_when:
            conditions = list(definition.enable_when)
            behavior = definition.enable_behavior or "all"
            return Computed(lambda: evaluate_enable_when(conditions, behavior, root.first_answers))
        return constant(True)

    def _calculate(self) -> Optional[List[AnswerValue]]:
        expression: Expression = self.calculated_expression  # type: ignore[assignment]
        results = self._root.oracle.evaluate(expression.expression, self._root, language=expression.language)
        if not results or results[0] is None:
            return None
        return to_answer_values(results, self.type)

    @property
    def is_calculated(self) -> bool:
        return self.calculated_expression is not None

    @property
    def enabled(self) -> bool:
        return self._enabled.get()

    @property
    def enabled_cell(self) -> Computed[bool]:
        return self._enabled

    @property
    def answer(self) -> Optional[List[AnswerValue]]:
        return self._answer.get()

    @answer.setter
    def answer(self, value: Optional[Iterable[AnswerInput]]) -> None:
        self.set_answer(value)

    @property
    def answer_cell(self) -> Union[Cell[Optional[List[AnswerValue]]], Computed[Optional[List[AnswerValue]]]]:
        return self._answer

    def set_answer(self, value: Optional[Iterable[AnswerInput]]) -> bool:
        """Replace the answer list; returns False (and changes nothing) on calculated items."""
        if not isinstance(self._answer, Cell):
            logger.debug("answer_write_ignored link_id=%s reason=calculated", self.link_id)
            return False
        self._answer.set(coerce_answers(value))
        return True

    def to_fhir(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"linkId": self.link_id}
        if self.id:
            result["id"] = self.id
        if self.text:
            result["text"] = self.text
        answers = self.answer
        if answers:
            result["answer"] = [answer.to_fhir() for answer in answers]
        children = [child.to_fhir() for child in self.items]
        if children:
            result["item"] = children
        return result

    def __repr__(self) -> str:
        return f"ReactiveResponseItem(link_id={self.link_id!r}, id={self.id!r})"


__all__ = [
    "AnswerInput",
    "ReactiveAnswerOption",
    "ReactiveResponseItem",
    "build_answer_options",
    "coerce_answers",
    "formula_flag",
    "option_display",
]
