"""
eligibility/errors.py

Standardized evaluation errors for the eligibility evaluator.
All errors include structured data for logging and debugging.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class EligibilityError(Exception):
    """Base class for eligibility evaluation errors."""
    message: str
    error_code: str = "EVALUATION_ERROR"
    context: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "context": self.context
        }

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


@dataclass
class InvalidCriteriaError(EligibilityError):
    """Record or criteria are not structured the way evaluation requires."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=message,
            error_code="INVALID_CRITERIA",
            **kwargs
        )


@dataclass
class UnsupportedOperationError(EligibilityError):
    """A leaf condition names an operator outside the registry."""
    operator: Optional[str] = None

    def __init__(self, message: str, operator: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            error_code="UNSUPPORTED_OPERATION",
            **kwargs
        )
        self.operator = operator

    def to_dict(self) -> Dict[str, Any]:
        base = super().to_dict()
        base["operator"] = self.operator
        return base


@dataclass
class EvaluationDepthError(EligibilityError):
    """Nesting exceeded the configured depth (deep or cyclic input)."""
    max_depth: int = 0

    def __init__(self, message: str, max_depth: int = 0, **kwargs):
        super().__init__(
            message=message,
            error_code="MAX_DEPTH_EXCEEDED",
            **kwargs
        )
        self.max_depth = max_depth

    def to_dict(self) -> Dict[str, Any]:
        base = super().to_dict()
        base["max_depth"] = self.max_depth
        return base


@dataclass
class ConfigurationError(EligibilityError):
    """Evaluator settings could not be built from their source."""
    setting: Optional[str] = None

    def __init__(self, message: str, setting: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            error_code="INVALID_CONFIG",
            **kwargs
        )
        self.setting = setting

    def to_dict(self) -> Dict[str, Any]:
        base = super().to_dict()
        base["setting"] = self.setting
        return base
