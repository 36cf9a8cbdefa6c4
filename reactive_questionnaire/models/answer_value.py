"""Typed answer values in FHIR wire shape.

An ``AnswerValue`` is a tagged union expressed the way FHIR does it: a set of
optional ``value[x]`` fields of which exactly one is populated. Equality is
structural over the populated fields (pydantic model equality), so two answers
built from the same wire dict compare equal.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class FhirModel(BaseModel):
    """Base for immutable wire models using FHIR's camelCase field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    def to_fhir(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Coding(FhirModel):
    system: Optional[str] = None
    version: Optional[str] = None
    code: Optional[str] = None
    display: Optional[str] = None


class Quantity(FhirModel):
    value: Optional[float] = None
    comparator: Optional[str] = None
    unit: Optional[str] = None
    system: Optional[str] = None
    code: Optional[str] = None


# Populated-field name -> wire name, in declaration order.
VALUE_FIELDS: Tuple[str, ...] = (
    "value_boolean",
    "value_decimal",
    "value_integer",
    "value_string",
    "value_date",
    "value_date_time",
    "value_time",
    "value_uri",
    "value_coding",
    "value_quantity",
)


class AnswerValue(FhirModel):
    value_boolean: Optional[bool] = None
    value_decimal: Optional[float] = None
    value_integer: Optional[int] = None
    value_string: Optional[str] = None
    value_date: Optional[str] = None
    value_date_time: Optional[str] = None
    value_time: Optional[str] = None
    value_uri: Optional[str] = None
    value_coding: Optional[Coding] = None
    value_quantity: Optional[Quantity] = None

    @model_validator(mode="after")
    def exactly_one_value(self) -> "AnswerValue":
        populated = [name for name in VALUE_FIELDS if getattr(self, name) is not None]
        if len(populated) != 1:
            raise ValueError(
                f"answer value must populate exactly one value[x] field, got {len(populated)}"
            )
        return self

    @property
    def field(self) -> str:
        """Python name of the populated ``value[x]`` field."""
        for name in VALUE_FIELDS:
            if getattr(self, name) is not None:
                return name
        raise AssertionError("unreachable: validated answer has no value")

    @property
    def value(self) -> Any:
        return getattr(self, self.field)

    def primitive(self) -> Any:
        """Return the value as plain Python data (codings and quantities as wire dicts)."""
        value = self.value
        if isinstance(value, FhirModel):
            return value.to_fhir()
        return value

    def strip(self) -> "AnswerValue":
        """Return a bare ``AnswerValue`` carrying only the populated value field."""
        return AnswerValue(**{self.field: self.value})


__all__ = ["FhirModel", "Coding", "Quantity", "AnswerValue", "VALUE_FIELDS"]
