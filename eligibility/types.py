"""Eligibility type definitions.

Defines the operator enumeration, the structured-value classification
used by condition matching, and the (Pydantic) result models returned
by explainable evaluation.
"""

from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field


class _Undefined:
    """Marker for a path that did not resolve to any value."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()


class Operator(str, Enum):
    """Registered condition operators."""
    GT = "gt"
    LT = "lt"
    GTE = "gte"
    LTE = "lte"
    IN = "in"
    AND = "and"
    OR = "or"

    @classmethod
    def lookup(cls, name: Any) -> Optional["Operator"]:
        """Return the operator named `name`, or None if unregistered."""
        try:
            return cls(name)
        except ValueError:
            return None


LOGICAL_OPERATORS = frozenset({Operator.AND, Operator.OR})


class ValueKind(str, Enum):
    """Kinds of structured values seen by the evaluator."""
    UNDEFINED = "undefined"
    NULL = "null"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    DATE = "date"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    OTHER = "other"


def classify(value: Any) -> ValueKind:
    """Map a Python value to exactly one ValueKind.

    bool is checked before number because it subclasses int; date covers
    datetime; str and bytes are primitives, never sequences.
    """
    if value is UNDEFINED:
        return ValueKind.UNDEFINED
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, (int, float, Decimal)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, date):
        return ValueKind.DATE
    if isinstance(value, Mapping):
        return ValueKind.MAPPING
    if isinstance(value, (list, tuple)):
        return ValueKind.SEQUENCE
    return ValueKind.OTHER


def is_object(value: Any) -> bool:
    """True iff value is non-null and composite (mapping or sequence)."""
    return classify(value) in (ValueKind.MAPPING, ValueKind.SEQUENCE)


def is_mapping(value: Any) -> bool:
    return classify(value) is ValueKind.MAPPING


def is_sequence(value: Any) -> bool:
    return classify(value) is ValueKind.SEQUENCE


class PathOutcome(BaseModel):
    """Verdict for a single top-level criteria entry."""
    path: str = Field(..., description="Dotted path from the criteria")
    matched: bool
    resolved: Any = Field(default=None, description="Value resolved from the record")
    resolved_defined: bool = Field(default=True, description="False if the path did not resolve")


class EligibilityResult(BaseModel):
    """Result of explainable eligibility evaluation."""
    eligible: bool
    outcomes: List[PathOutcome] = Field(default_factory=list)
    failed_paths: List[str] = Field(default_factory=list)
    explanation_text: str = ""
