"""Static visibility (enableWhen) evaluation.

Centralizes the comparison rules used to decide whether an item is enabled
from a list of declarative conditions:

- ``exists`` compares "the referenced item has at least one answer" with the
  expected presence flag (``answerBoolean``, default true).
- Every other operator is false when the referenced item has no answers, and
  otherwise true when ANY current answer satisfies the comparison.
- Codings support only ``=``/``!=``; quantities support only ordered
  comparison of their numeric ``value`` (units are ignored).

Answers are looked up through a caller-provided callable so this module stays
independent of the node tree.
"""

from __future__ import annotations

import operator
from typing import Any, Callable, List, Optional, Sequence

from reactive_questionnaire.models.answer_value import AnswerValue, Coding, Quantity
from reactive_questionnaire.models.questionnaire import EnableWhen

AnswerLookup = Callable[[str], Optional[List[AnswerValue]]]

_ORDERED = {
    "=": operator.eq,
    "!=": operator.ne,
    ">": operator.gt,
    "<": operator.lt,
    ">=": operator.ge,
    "<=": operator.le,
}

# Expected-literal field -> answer field compared natively.
_SCALAR_FIELDS = (
    ("answer_boolean", "value_boolean"),
    ("answer_decimal", "value_decimal"),
    ("answer_integer", "value_integer"),
    ("answer_date", "value_date"),
    ("answer_date_time", "value_date_time"),
    ("answer_time", "value_time"),
    ("answer_string", "value_string"),
)


def evaluate_enable_when(
    conditions: Sequence[EnableWhen],
    behavior: Optional[str],
    get_answers: AnswerLookup,
) -> bool:
    """Combine condition results with ``all`` (default) or ``any``."""
    results = (evaluate_condition(c, get_answers) for c in conditions)
    if behavior == "any":
        return any(results)
    return all(results)


def evaluate_condition(condition: EnableWhen, get_answers: AnswerLookup) -> bool:
    answers = get_answers(condition.question)
    has_answer = bool(answers)

    if condition.operator == "exists":
        expect_exists = True if condition.answer_boolean is None else condition.answer_boolean
        return expect_exists == has_answer

    if not has_answer:
        return False
    return any(_compare_answer(condition, answer) for answer in answers or [])


def _compare_answer(condition: EnableWhen, answer: AnswerValue) -> bool:
    op = condition.operator
    for expected_field, actual_field in _SCALAR_FIELDS:
        expected = getattr(condition, expected_field)
        if expected is not None:
            return compare_ordered(op, getattr(answer, actual_field), expected)
    if condition.answer_coding is not None:
        return compare_coding(op, answer.value_coding, condition.answer_coding)
    if condition.answer_quantity is not None:
        return compare_quantity(op, answer.value_quantity, condition.answer_quantity)
    return False


def compare_ordered(op: str, actual: Any, expected: Any) -> bool:
    if actual is None:
        return False
    fn = _ORDERED.get(op)
    if fn is None:
        return False
    return bool(fn(actual, expected))


def compare_coding(op: str, actual: Optional[Coding], expected: Coding) -> bool:
    if actual is None:
        return False
    code_match = actual.code == expected.code
    system_match = not expected.system or actual.system == expected.system
    match = code_match and system_match
    if op == "=":
        return match
    if op == "!=":
        return not match
    return False


def compare_quantity(op: str, actual: Optional[Quantity], expected: Quantity) -> bool:
    if actual is None or actual.value is None or expected.value is None:
        return False
    if op in ("=", "!="):
        return False
    return compare_ordered(op, actual.value, expected.value)


__all__ = [
    "AnswerLookup",
    "evaluate_enable_when",
    "evaluate_condition",
    "compare_ordered",
    "compare_coding",
    "compare_quantity",
]
