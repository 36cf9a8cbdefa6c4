"""json-logic adapter for the expression oracle.

Expressions are JSON encoded JSON Logic rules. ``{"var": "<linkId>"}``
resolves to the first answer value of the first item registered under that
linkId, and a dotted tail addresses into that value (``"dx.code"``). LinkIds
that contain dots themselves are matched exactly first, then by the longest
registered prefix.

Answers are read from the live root before the rule runs and handed to
json-logic as a plain dict keyed by generated aliases, so a failing upstream
formula raises instead of being read as a missing value. A rule that
references a var (without a default) that has no answer yields an empty
result, the same way FHIRPath propagates empty collections.
"""

from __future__ import annotations

import functools
import json
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Set, Tuple
import logging

from json_logic import jsonLogic

from reactive_questionnaire.logic.oracle import AnswerData, ExpressionError

if TYPE_CHECKING:  # pragma: no cover
    from reactive_questionnaire.logic.questionnaire_response import ReactiveQuestionnaireResponse

logger = logging.getLogger(__name__)

DEFAULT_CACHE_SIZE = 256
JSON_LOGIC_LANGUAGE = "application/json-logic"


def _load_rule(expression: str) -> Any:
    try:
        return json.loads(expression)
    except json.JSONDecodeError as e:
        raise ExpressionError(f"expression is not valid JSON Logic: {e}") from e


def _split_var(name: str, link_ids: Set[str]) -> Optional[Tuple[str, str]]:
    """Split a var name into ``(linkId, tail)``; None when no linkId matches."""
    if name in link_ids:
        return name, ""
    parts = name.split(".")
    for cut in range(len(parts) - 1, 0, -1):
        head = ".".join(parts[:cut])
        if head in link_ids:
            return head, ".".join(parts[cut:])
    return None


def _has_path(value: Any, tail: str) -> bool:
    if not tail:
        return True
    current = value
    for key in tail.split("."):
        if isinstance(current, list):
            if not key.isdigit() or int(key) >= len(current):
                return False
            current = current[int(key)]
        elif isinstance(current, Mapping):
            if key not in current:
                return False
            current = current[key]
        else:
            return False
    return True


class _Binder:
    """Rewrites var references to aliases over a snapshot of answer values."""

    def __init__(self, root: "ReactiveQuestionnaireResponse") -> None:
        self._answers = AnswerData(root)
        self._link_ids = set(root.link_ids())
        self._aliases: Dict[str, str] = {}
        self.data: Dict[str, Any] = {}
        self.missing: List[str] = []

    def bind(self, rule: Any) -> Any:
        if isinstance(rule, list):
            return [self.bind(arg) for arg in rule]
        if not isinstance(rule, dict):
            return rule
        if len(rule) == 1 and "var" in rule:
            return self._bind_var(rule["var"])
        return {op: self.bind(args) for op, args in rule.items()}

    def _bind_var(self, args: Any) -> Any:
        parts = args if isinstance(args, list) else [args]
        if not parts or not isinstance(parts[0], str) or not parts[0]:
            return {"var": args}
        name = parts[0]
        has_default = len(parts) > 1
        split = _split_var(name, self._link_ids)
        if split is None:
            if has_default:
                return parts[1]
            self.missing.append(name)
            return {"var": args}
        link_id, tail = split
        alias = self._alias(link_id)
        if not has_default and (alias not in self.data or not _has_path(self.data[alias], tail)):
            self.missing.append(name)
        path = f"{alias}.{tail}" if tail else alias
        return {"var": [path, *parts[1:]] if isinstance(args, list) else path}

    def _alias(self, link_id: str) -> str:
        alias = self._aliases.get(link_id)
        if alias is None:
            alias = f"v{len(self._aliases)}"
            self._aliases[link_id] = alias
            try:
                self.data[alias] = self._answers[link_id]
            except KeyError:
                pass
        return alias


class JsonLogicOracle:
    """Evaluate JSON Logic expressions against a live questionnaire response."""

    language = JSON_LOGIC_LANGUAGE

    def __init__(self, cache_size: int = DEFAULT_CACHE_SIZE) -> None:
        self._parse = functools.lru_cache(maxsize=cache_size)(_load_rule)

    def evaluate(
        self,
        expression: str,
        root: "ReactiveQuestionnaireResponse",
        language: Optional[str] = None,
    ) -> List[Any]:
        if language is not None and language != JSON_LOGIC_LANGUAGE:
            raise ExpressionError(f"unsupported expression language {language!r}")
        rule = self._parse(expression)
        binder = _Binder(root)
        bound = binder.bind(rule)
        if binder.missing:
            logger.debug("oracle_empty_result missing=%s", binder.missing)
            return []
        try:
            result = jsonLogic(bound, binder.data)
        except ZeroDivisionError:
            logger.debug("oracle_empty_result reason=division_by_zero")
            return []
        except (TypeError, ValueError) as e:
            raise ExpressionError(f"expression could not be evaluated: {e}") from e
        if result is None:
            return []
        if isinstance(result, list):
            return result
        return [result]


__all__ = ["DEFAULT_CACHE_SIZE", "JSON_LOGIC_LANGUAGE", "JsonLogicOracle"]
