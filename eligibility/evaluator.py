"""Eligibility evaluation engine.

Checks a record against a criteria tree. Criteria map dotted paths to
condition nodes; every entry must hold. A condition node is either a
plain value (equality), a mapping of operators to operands, a mapping
of nested conditions for object-valued fields, or a list of
alternatives of which at least one must hold.
"""

import logging
import operator
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from .config import EvaluatorConfig
from .errors import EligibilityError, EvaluationDepthError, InvalidCriteriaError, UnsupportedOperationError
from .paths import resolve_by_path
from .types import (
    UNDEFINED, EligibilityResult, Operator, PathOutcome, ValueKind,
    classify, is_mapping, is_object, is_sequence
)

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ABSENT_KINDS = (ValueKind.UNDEFINED, ValueKind.NULL)
_ORDERED_KINDS = (ValueKind.BOOL, ValueKind.NUMBER, ValueKind.STRING, ValueKind.OTHER)

OperatorFn = Callable[[Any, Any, int], bool]


def epoch_millis(value: Any) -> int:
    """Milliseconds since the Unix epoch; naive datetimes and dates are UTC."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
    else:
        value = datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    return (value - _EPOCH) // timedelta(milliseconds=1)


class EligibilityEvaluator:
    """
    Evaluates records against criteria trees.

    Holds nothing but an immutable operator registry and config, so one
    instance can be shared across threads.
    """

    def __init__(self, config: Optional[EvaluatorConfig] = None):
        self.config = config if config is not None else EvaluatorConfig()

        operations: Dict[Operator, OperatorFn] = {
            Operator.GT: lambda a, b, depth: self._compare_values(a, b, operator.gt),
            Operator.LT: lambda a, b, depth: self._compare_values(a, b, operator.lt),
            Operator.GTE: lambda a, b, depth: self._compare_values(a, b, operator.ge),
            Operator.LTE: lambda a, b, depth: self._compare_values(a, b, operator.le),
            Operator.IN: lambda a, b, depth: self._evaluate_in(a, b),
            Operator.AND: lambda a, b, depth: self._evaluate_logical_operation(Operator.AND, a, b, depth),
            Operator.OR: lambda a, b, depth: self._evaluate_logical_operation(Operator.OR, a, b, depth),
        }
        missing = [op.value for op in Operator if op not in operations]
        if missing:
            raise ValueError(f"Operator registry is missing: {missing}")
        self._operations: Mapping[Operator, OperatorFn] = MappingProxyType(operations)

    @property
    def operations(self) -> Mapping[Operator, OperatorFn]:
        return self._operations

    def is_eligible(self, record: Any, criteria: Any) -> bool:
        """Determine if a record satisfies every entry of the criteria.

        Args:
            record: The record data (e.g. a cart)
            criteria: Mapping of dotted paths to condition nodes

        Returns:
            True if all criteria hold (vacuously True for empty criteria)

        Raises:
            InvalidCriteriaError: If record or criteria are not mappings, or a
                logical operator is given a non-mapping operand
            UnsupportedOperationError: If a condition uses an unknown operator
            EvaluationDepthError: If nesting exceeds config.max_depth
        """
        self._check_inputs(record, criteria)

        for path, condition in criteria.items():
            if not self._path_matches(record, path, condition):
                logger.debug("Criteria path %r not satisfied", path)
                return False
            logger.debug("Criteria path %r satisfied", path)
        return True

    def explain(self, record: Any, criteria: Any) -> EligibilityResult:
        """Evaluate every criteria entry and report per-path outcomes.

        Unlike is_eligible this does not stop at the first failing path.
        """
        self._check_inputs(record, criteria)

        outcomes: List[PathOutcome] = []
        for path, condition in criteria.items():
            try:
                resolved = resolve_by_path(record, path, self.config.max_depth)
                matched = self.matches(resolved, condition)
            except EligibilityError as e:
                logger.warning("Evaluation of criteria path %r failed: %s", path, e)
                raise
            logger.debug("Criteria path %r %s", path, "satisfied" if matched else "not satisfied")
            outcomes.append(PathOutcome(
                path=path,
                matched=matched,
                resolved=_render(resolved),
                resolved_defined=resolved is not UNDEFINED,
            ))

        failed = [o.path for o in outcomes if not o.matched]
        return EligibilityResult(
            eligible=not failed,
            outcomes=outcomes,
            failed_paths=failed,
            explanation_text=_generate_explanation(outcomes),
        )

    def matches(self, value: Any, condition: Any, depth: int = 0) -> bool:
        """Check whether a resolved value satisfies a condition node.

        Precedence: primitive equality when neither side is an object; any
        element of a sequence value; any alternative of a sequence condition;
        key-by-key descent when the value is a mapping; otherwise every
        operator of the condition must hold.

        A primitive condition against a mapping value is False, not a
        vacuous match. Each nesting level of the value or condition costs
        one unit of config.max_depth.
        """
        self._check_depth(depth)

        if not is_object(condition) and not is_object(value):
            return self._compare_primitive_values(value, condition)

        # Broadcast results: some element must satisfy the condition
        if is_sequence(value):
            return any(self.matches(item, condition, depth + 1) for item in value)

        # Alternatives: the value must satisfy at least one of them
        if is_sequence(condition):
            return any(self.matches(value, alternative, depth + 1) for alternative in condition)

        if is_mapping(value):
            if not is_mapping(condition):
                return False
            return all(
                self._match_key(value, key, sub_condition, depth)
                for key, sub_condition in condition.items()
            )

        return all(
            self.evaluate_operator(op, value, operand, depth + 1)
            for op, operand in condition.items()
        )

    def evaluate_operator(self, op: Any, value: Any, operand: Any, depth: int = 0) -> bool:
        """Apply a registered operator to a resolved value and its operand.

        Raises:
            UnsupportedOperationError: If op is not a registered operator
        """
        self._check_depth(depth)

        registered = Operator.lookup(op)
        if registered is None:
            raise UnsupportedOperationError(f"Unsupported operation: {op}", operator=str(op))
        return self._operations[registered](value, operand, depth)

    def _path_matches(self, record: Mapping, path: str, condition: Any) -> bool:
        resolved = resolve_by_path(record, path, self.config.max_depth)
        return self.matches(resolved, condition)

    def _match_key(self, value: Mapping, key: Any, sub_condition: Any, depth: int) -> bool:
        # One nesting level per key: depth is raised only on the way into matches
        field_value = value.get(key, UNDEFINED)
        if is_sequence(sub_condition):
            return any(self.matches(field_value, sub, depth + 1) for sub in sub_condition)
        return self.matches(field_value, sub_condition, depth + 1)

    def _evaluate_logical_operation(self, logical_op: Operator, value: Any, conditions: Any, depth: int) -> bool:
        if not is_mapping(conditions):
            raise InvalidCriteriaError(
                f"Conditions for logical operation '{logical_op.value}' must be an object",
                context={"operator": logical_op.value},
            )

        results = (
            self.evaluate_operator(op, value, operand, depth + 1)
            for op, operand in conditions.items()
        )
        if logical_op is Operator.AND:
            return all(results)
        return any(results)

    def _evaluate_in(self, value: Any, candidates: Any) -> bool:
        if not is_sequence(candidates):
            return False
        return any(self._compare_primitive_values(value, candidate) for candidate in candidates)

    def _compare_primitive_values(self, a: Any, b: Any) -> bool:
        kind_a, kind_b = classify(a), classify(b)

        if kind_a is ValueKind.DATE and kind_b is ValueKind.DATE:
            return epoch_millis(a) == epoch_millis(b)
        if kind_a in _ABSENT_KINDS or kind_b in _ABSENT_KINDS:
            return kind_a in _ABSENT_KINDS and kind_b in _ABSENT_KINDS
        if kind_a is kind_b:
            return a == b

        coerced = self._coerce_numeric_pair(a, kind_a, b, kind_b)
        if coerced is None:
            return False
        return coerced[0] == coerced[1]

    def _compare_values(self, a: Any, b: Any, compare_fn: Callable[[Any, Any], bool]) -> bool:
        kind_a, kind_b = classify(a), classify(b)

        if kind_a is ValueKind.DATE and kind_b is ValueKind.DATE:
            return compare_fn(epoch_millis(a), epoch_millis(b))

        if kind_a is not kind_b:
            coerced = self._coerce_numeric_pair(a, kind_a, b, kind_b)
            if coerced is None:
                return False
            a, b = coerced
        elif kind_a not in _ORDERED_KINDS:
            return False

        try:
            return bool(compare_fn(a, b))
        except TypeError:
            # Incomparable values never satisfy an ordering
            return False

    def _coerce_numeric_pair(
        self, a: Any, kind_a: ValueKind, b: Any, kind_b: ValueKind
    ) -> Optional[Tuple[Decimal, Decimal]]:
        """Coerce a (number, numeric string) pair to Decimals when enabled."""
        if not self.config.coerce_numeric_strings:
            return None
        if {kind_a, kind_b} != {ValueKind.NUMBER, ValueKind.STRING}:
            return None

        try:
            left, right = Decimal(str(a).strip()), Decimal(str(b).strip())
        except InvalidOperation:
            return None
        if not (left.is_finite() and right.is_finite()):
            return None
        return left, right

    def _check_inputs(self, record: Any, criteria: Any) -> None:
        if not is_mapping(record) or not is_mapping(criteria):
            raise InvalidCriteriaError(
                "Both record and criteria should be objects",
                context={
                    "record_kind": classify(record).value,
                    "criteria_kind": classify(criteria).value,
                },
            )
        for path in criteria:
            if not isinstance(path, str):
                raise InvalidCriteriaError(
                    f"Criteria paths must be strings, got {type(path).__name__}",
                    context={"path": repr(path)},
                )

    def _check_depth(self, depth: int) -> None:
        if depth > self.config.max_depth:
            raise EvaluationDepthError(
                f"Condition nesting exceeded maximum depth of {self.config.max_depth}",
                max_depth=self.config.max_depth,
            )


def _render(value: Any) -> Any:
    """Make a resolved value safe for result models (UNDEFINED -> None)."""
    if value is UNDEFINED:
        return None
    if is_sequence(value):
        return [_render(item) for item in value]
    return value


def _generate_explanation(outcomes: List[PathOutcome]) -> str:
    """Generate a human-readable summary of per-path outcomes."""
    if not outcomes:
        return "Eligible: no criteria (vacuously satisfied)"

    failed = [o for o in outcomes if not o.matched]
    parts = ["Eligible" if not failed else "Not eligible"]

    summaries = []
    for outcome in outcomes:
        got = outcome.resolved if outcome.resolved_defined else "undefined"
        verdict = "pass" if outcome.matched else "fail"
        summaries.append(f"{outcome.path} {verdict} (got: {got})")
    parts.append(f"checks: {' AND '.join(summaries)}")

    if failed:
        parts.append(f"failed: {', '.join(o.path for o in failed)}")

    return "; ".join(parts)


@lru_cache(maxsize=1)
def get_default_evaluator() -> EligibilityEvaluator:
    """Shared evaluator configured from the environment."""
    return EligibilityEvaluator(EvaluatorConfig.from_env())


def is_eligible(record: Any, criteria: Any) -> bool:
    """Determine if a record satisfies the criteria using the default evaluator."""
    return get_default_evaluator().is_eligible(record, criteria)


def explain(record: Any, criteria: Any) -> EligibilityResult:
    """Explain an eligibility verdict using the default evaluator."""
    return get_default_evaluator().explain(record, criteria)
