"""Expression oracle contract.

The engine never parses formulas itself. It hands the expression string and
the live root model (plus the declared expression language) to an ``Oracle``
and receives an ordered list of raw values. Because the root is passed live,
every answer the oracle reads goes through an answer cell and becomes a
dependency of the computed cell that triggered the evaluation.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional, Protocol

if TYPE_CHECKING:  # pragma: no cover
    from reactive_questionnaire.logic.questionnaire_response import ReactiveQuestionnaireResponse


class ExpressionError(ValueError):
    """Raised when the oracle cannot parse or evaluate an expression."""


class Oracle(Protocol):
    def evaluate(
        self,
        expression: str,
        root: "ReactiveQuestionnaireResponse",
        language: Optional[str] = None,
    ) -> List[Any]:
        ...


class LanguageOracle:
    """Dispatch each expression to the oracle registered for its language.

    Expressions without a language go to ``default_language``.
    """

    def __init__(self, oracles: Mapping, default_language: Optional[str] = None) -> None:
        if not oracles:
            raise ValueError("at least one oracle is required")
        self._oracles: Dict[str, Oracle] = dict(oracles)
        self.default_language = default_language or next(iter(self._oracles))

    @property
    def languages(self) -> List[str]:
        return list(self._oracles)

    def evaluate(
        self,
        expression: str,
        root: "ReactiveQuestionnaireResponse",
        language: Optional[str] = None,
    ) -> List[Any]:
        language = language or self.default_language
        oracle = self._oracles.get(language)
        if oracle is None:
            raise ExpressionError(f"unsupported expression language {language!r}")
        return oracle.evaluate(expression, root, language=language)


class AnswerData(Mapping):
    """Read-only ``linkId -> first answer value`` view over a live root.

    Lookups raise KeyError when the linkId is unknown or its first item has no
    answers. Values are plain Python data (see ``AnswerValue.primitive``).
    """

    def __init__(self, root: "ReactiveQuestionnaireResponse") -> None:
        self._root = root

    def __getitem__(self, link_id: str) -> Any:
        items = self._root.get_items(link_id)
        if not items:
            raise KeyError(link_id)
        answers = items[0].answer
        if not answers:
            raise KeyError(link_id)
        return answers[0].primitive()

    def __iter__(self) -> Iterator[str]:
        return iter(self._root.link_ids())

    def __len__(self) -> int:
        return len(self._root.link_ids())


__all__ = ["ExpressionError", "Oracle", "LanguageOracle", "AnswerData"]
