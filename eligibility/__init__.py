"""Eligibility Evaluator v1.0.

Checks whether a structured record (e.g. a cart) satisfies a declarative
criteria tree of dotted paths, comparison operators and logical
composition.
"""

from .types import (
    UNDEFINED, Operator, ValueKind, PathOutcome, EligibilityResult,
    classify, is_object
)
from .errors import (
    EligibilityError, InvalidCriteriaError, UnsupportedOperationError,
    EvaluationDepthError, ConfigurationError
)
from .config import EvaluatorConfig
from .paths import resolve_by_path
from .evaluator import EligibilityEvaluator, get_default_evaluator, is_eligible, explain
from .compiler import load_criteria, load_record, validate_criteria, compute_criteria_hash

__version__ = "1.0.0"

__all__ = [
    "UNDEFINED",
    "Operator",
    "ValueKind",
    "PathOutcome",
    "EligibilityResult",
    "classify",
    "is_object",
    "EligibilityError",
    "InvalidCriteriaError",
    "UnsupportedOperationError",
    "EvaluationDepthError",
    "ConfigurationError",
    "EvaluatorConfig",
    "resolve_by_path",
    "EligibilityEvaluator",
    "get_default_evaluator",
    "is_eligible",
    "explain",
    "load_criteria",
    "load_record",
    "validate_criteria",
    "compute_criteria_hash",
]
