"""Coercion of raw formula results into typed answer values.

The item's declared type disambiguates raw results:

- numbers become ``valueDecimal``, or ``valueInteger`` (rounded half up) on
  integer items;
- strings become ``valueString``, or ``valueDate``/``valueDateTime`` on date
  and dateTime items;
- booleans become ``valueBoolean``;
- mappings with a ``code`` key become ``valueCoding``, mappings with a
  ``value`` key become ``valueQuantity``.

Anything else yields None and is dropped by the caller.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Any, Iterable, List, Mapping, Optional
import logging

from pydantic import ValidationError

from reactive_questionnaire.models.answer_value import AnswerValue, Coding, Quantity
from reactive_questionnaire.models.item_type import ItemType

logger = logging.getLogger(__name__)


def to_answer_value(raw: Any, item_type: str) -> Optional[AnswerValue]:
    if raw is None:
        return None
    # bool is an int subclass; test it first.
    if isinstance(raw, bool):
        return AnswerValue(value_boolean=raw)
    if isinstance(raw, (int, float, Decimal)):
        if item_type == ItemType.INTEGER:
            return AnswerValue(value_integer=math.floor(float(raw) + 0.5))
        return AnswerValue(value_decimal=float(raw))
    if isinstance(raw, str):
        if item_type == ItemType.DATE:
            return AnswerValue(value_date=raw)
        if item_type == ItemType.DATE_TIME:
            return AnswerValue(value_date_time=raw)
        return AnswerValue(value_string=raw)
    if isinstance(raw, Mapping):
        try:
            if "code" in raw:
                return AnswerValue(value_coding=Coding.model_validate(dict(raw)))
            if "value" in raw:
                return AnswerValue(value_quantity=Quantity.model_validate(dict(raw)))
        except ValidationError:
            logger.debug("calculated_result_invalid raw=%r", raw)
            return None
    return None


def to_answer_values(results: Iterable[Any], item_type: str) -> List[AnswerValue]:
    """Map every raw result, silently dropping unrecognized shapes."""
    answers: List[AnswerValue] = []
    for raw in results:
        answer = to_answer_value(raw, item_type)
        if answer is None:
            logger.debug("calculated_result_dropped item_type=%s raw=%r", item_type, raw)
            continue
        answers.append(answer)
    return answers


__all__ = ["to_answer_value", "to_answer_values"]
