"""Formula metadata carried in SDC extensions on questionnaire items.

Three extensions drive derivation:

- calculatedExpression: the item's answer is a formula result;
- enableWhenExpression: the item's enabled state is a formula result;
- answerOptionsToggleExpression: a group of answer options shares one formula
  that decides whether those options are enabled.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from reactive_questionnaire.models.answer_value import AnswerValue
from reactive_questionnaire.models.questionnaire import Expression, Extension

SDC_BASE = "http://hl7.org/fhir/uv/sdc/StructureDefinition/"
CALCULATED_EXPRESSION = SDC_BASE + "sdc-questionnaire-calculatedExpression"
ENABLE_WHEN_EXPRESSION = SDC_BASE + "sdc-questionnaire-enableWhenExpression"
ANSWER_OPTIONS_TOGGLE_EXPRESSION = SDC_BASE + "sdc-questionnaire-answerOptionsToggleExpression"

# Sub-extension value fields that may name a governed option, in lookup order.
_OPTION_FIELDS = ("value_coding", "value_string", "value_integer", "value_decimal", "value_boolean")


@dataclass(frozen=True)
class ToggleExpression:
    """One answerOptionsToggleExpression group."""

    options: List[AnswerValue]
    expression: Expression


def find_expression(extensions: Optional[Iterable[Extension]], url: str) -> Optional[Expression]:
    """Return the ``valueExpression`` of the first extension with ``url``."""
    for ext in extensions or ():
        if ext.url == url:
            return ext.value_expression
    return None


def get_calculated_expression(extensions: Optional[Iterable[Extension]]) -> Optional[Expression]:
    return find_expression(extensions, CALCULATED_EXPRESSION)


def get_enable_when_expression(extensions: Optional[Iterable[Extension]]) -> Optional[Expression]:
    return find_expression(extensions, ENABLE_WHEN_EXPRESSION)


def _option_value(sub: Extension) -> Optional[AnswerValue]:
    for name in _OPTION_FIELDS:
        value = getattr(sub, name)
        if value is not None:
            return AnswerValue(**{name: value})
    return None


def get_answer_options_toggle_expressions(
    extensions: Optional[Iterable[Extension]],
) -> List[ToggleExpression]:
    """Parse every toggle group in declaration order.

    Groups without an expression or without any option are skipped.
    """
    groups: List[ToggleExpression] = []
    for ext in extensions or ():
        if ext.url != ANSWER_OPTIONS_TOGGLE_EXPRESSION or not ext.extension:
            continue
        options: List[AnswerValue] = []
        expression: Optional[Expression] = None
        for sub in ext.extension:
            if sub.url == "option":
                value = _option_value(sub)
                if value is not None:
                    options.append(value)
            elif sub.url == "expression" and sub.value_expression is not None:
                expression = sub.value_expression
        if expression is not None and options:
            groups.append(ToggleExpression(options=options, expression=expression))
    return groups


__all__ = [
    "CALCULATED_EXPRESSION",
    "ENABLE_WHEN_EXPRESSION",
    "ANSWER_OPTIONS_TOGGLE_EXPRESSION",
    "ToggleExpression",
    "find_expression",
    "get_calculated_expression",
    "get_enable_when_expression",
    "get_answer_options_toggle_expressions",
]
