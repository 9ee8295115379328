"""Evaluator configuration.

Defaults can be overridden from the environment:
    ELIGIBILITY_MAX_DEPTH                 recursion guard for condition matching
    ELIGIBILITY_COERCE_NUMERIC_STRINGS    "1" lets "5" compare equal to 5
"""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from .errors import ConfigurationError

DEFAULT_MAX_DEPTH = 100

# Nested and/or costs up to five interpreter frames per depth level; the cap
# keeps the guard below the default recursion limit of 1000 with room for callers.
MAX_DEPTH_LIMIT = 120


class EvaluatorConfig(BaseModel):
    """Immutable evaluator settings."""
    model_config = ConfigDict(frozen=True)

    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=1, le=MAX_DEPTH_LIMIT, description="Maximum condition nesting depth")
    coerce_numeric_strings: bool = Field(default=False, description="Compare numeric strings to numbers by value")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EvaluatorConfig":
        """Build config from ELIGIBILITY_* environment variables.

        Raises:
            ConfigurationError: If a variable is not a valid setting
        """
        env = os.environ if environ is None else environ
        raw_depth = env.get("ELIGIBILITY_MAX_DEPTH", str(DEFAULT_MAX_DEPTH))
        try:
            return cls(
                max_depth=int(raw_depth),
                coerce_numeric_strings=env.get("ELIGIBILITY_COERCE_NUMERIC_STRINGS", "0") == "1",
            )
        except ValueError as e:
            # pydantic.ValidationError is a ValueError
            raise ConfigurationError(
                f"Invalid ELIGIBILITY_MAX_DEPTH {raw_depth!r}: expected an integer from 1 to {MAX_DEPTH_LIMIT}",
                setting="ELIGIBILITY_MAX_DEPTH",
            ) from e
