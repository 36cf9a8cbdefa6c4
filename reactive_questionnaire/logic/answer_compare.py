"""Equality and matching helpers for answer values.

Two notions of sameness are used across the engine:

- ``answers_equal`` is the deep equality used by answer cells to suppress
  no-op writes. It compares whole answer lists structurally and treats
  ``None`` (unset) as distinct from ``[]``.
- ``answer_values_match`` is the looser identity used to attach answer
  options to toggle groups: codings match on code and system only, scalars
  match when the same field holds the same value.
"""

from __future__ import annotations

from typing import List, Optional

from reactive_questionnaire.models.answer_value import AnswerValue, VALUE_FIELDS


def answers_equal(a: Optional[List[AnswerValue]], b: Optional[List[AnswerValue]]) -> bool:
    if a is None or b is None:
        return a is None and b is None
    if len(a) != len(b):
        return False
    return all(x.to_fhir() == y.to_fhir() for x, y in zip(a, b))


def answer_values_match(a: AnswerValue, b: AnswerValue) -> bool:
    """Return True when two values identify the same answer option."""
    if a.value_coding is not None and b.value_coding is not None:
        return (
            a.value_coding.code == b.value_coding.code
            and a.value_coding.system == b.value_coding.system
        )
    for name in VALUE_FIELDS:
        if name in ("value_coding", "value_quantity"):
            continue
        left = getattr(a, name)
        right = getattr(b, name)
        if left is not None and right is not None:
            return left == right
    return False


__all__ = ["answers_equal", "answer_values_match"]
