"""Questionnaire item type constants.

Provides a simple constants container instead of an Enum so item types stay
plain strings in wire models and in the few places that dispatch on them.
"""

from __future__ import annotations


class ItemType:
    GROUP = "group"
    DISPLAY = "display"
    BOOLEAN = "boolean"
    DECIMAL = "decimal"
    INTEGER = "integer"
    DATE = "date"
    DATE_TIME = "dateTime"
    TIME = "time"
    STRING = "string"
    TEXT = "text"
    URL = "url"
    CHOICE = "choice"
    OPEN_CHOICE = "open-choice"
    ATTACHMENT = "attachment"
    REFERENCE = "reference"
    QUANTITY = "quantity"


ITEM_TYPES = frozenset(
    value for name, value in vars(ItemType).items() if not name.startswith("_")
)


__all__ = ["ItemType", "ITEM_TYPES"]
