"""Criteria document loading and validation.

Loads criteria and records from JSON, checks the minimal shape the
evaluator relies on, and computes criteria hashes for audit.
"""

import hashlib
import json
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

from .errors import InvalidCriteriaError
from .types import LOGICAL_OPERATORS, Operator, is_mapping, is_sequence

DATE_KEY = "$date"


def load_criteria(path: Union[str, Path], parse_dates: bool = False) -> Dict[str, Any]:
    """Load a criteria document from a JSON file.

    Args:
        path: Path to criteria JSON file
        parse_dates: Convert {"$date": "<ISO-8601>"} wrappers to datetime

    Returns:
        Criteria mapping of dotted paths to condition nodes

    Raises:
        FileNotFoundError: If the file doesn't exist
        InvalidCriteriaError: If the document is not a JSON object or fails
            shape validation
    """
    criteria = _load_object(path, "criteria", parse_dates)

    valid, message = validate_criteria(criteria)
    if not valid:
        raise InvalidCriteriaError(f"Invalid criteria in {path}: {message}", context={"path": str(path)})

    return criteria


def load_record(path: Union[str, Path], parse_dates: bool = False) -> Dict[str, Any]:
    """Load a record from a JSON file."""
    return _load_object(path, "record", parse_dates)


def _load_object(path: Union[str, Path], label: str, parse_dates: bool) -> Dict[str, Any]:
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"{label.capitalize()} file not found: {path}")

    with open(path, "r") as f:
        try:
            data = json.load(f, object_hook=_date_hook if parse_dates else None)
        except json.JSONDecodeError as e:
            raise InvalidCriteriaError(f"Invalid JSON in {label} file {path}: {e}") from e

    if not isinstance(data, dict):
        raise InvalidCriteriaError(
            f"Top level of {label} file {path} must be an object, got {type(data).__name__}"
        )
    return data


def _date_hook(obj: Dict[str, Any]) -> Any:
    if len(obj) == 1 and DATE_KEY in obj:
        value = obj[DATE_KEY]
        if not isinstance(value, str):
            raise InvalidCriteriaError(f"{DATE_KEY} value must be an ISO-8601 string, got {value!r}")
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as e:
            raise InvalidCriteriaError(f"Invalid {DATE_KEY} value {value!r}: {e}") from e
    return obj


def validate_criteria(criteria: Any) -> Tuple[bool, str]:
    """Check criteria shape without evaluating it.

    Checks:
    - criteria is a mapping with non-empty dotted string paths
    - every and/or operand is a mapping of registered operators

    Leaf operator names elsewhere cannot be told apart from nested field
    names until a record is resolved, so they are left to evaluation.

    Returns:
        (is_valid, message)
    """
    if not is_mapping(criteria):
        return False, f"Criteria must be an object, got {type(criteria).__name__}"

    for path, condition in criteria.items():
        if not isinstance(path, str):
            return False, f"Criteria path must be a string: {path!r}"
        if not path or any(not part for part in path.split(".")):
            return False, f"Empty segment in criteria path: {path!r}"

        errors = _logical_operand_errors(condition, path)
        if errors:
            return False, errors[0]

    return True, "Valid"


def _logical_operand_errors(condition: Any, location: str) -> List[str]:
    errors: List[str] = []

    if is_sequence(condition):
        for index, item in enumerate(condition):
            errors.extend(_logical_operand_errors(item, f"{location}[{index}]"))
        return errors

    if not is_mapping(condition):
        return errors

    for key, value in condition.items():
        op = Operator.lookup(key)
        if op not in LOGICAL_OPERATORS:
            errors.extend(_logical_operand_errors(value, f"{location}.{key}"))
            continue

        if not is_mapping(value):
            errors.append(f"{location}: operand of '{op.value}' must be an object")
            continue
        for inner in value:
            if Operator.lookup(inner) is None:
                errors.append(f"{location}.{op.value}: unsupported operator '{inner}'")
        errors.extend(_logical_operand_errors(value, f"{location}.{op.value}"))

    return errors


def compute_criteria_hash(criteria: Dict[str, Any]) -> str:
    """Compute SHA256 hash of canonical JSON representation.

    Args:
        criteria: Criteria mapping (dates are hashed as ISO strings)

    Returns:
        Hex-encoded SHA256 hash
    """
    canonical = json.dumps(criteria, sort_keys=True, separators=(",", ":"), default=_json_default)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _json_default(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return {DATE_KEY: value.isoformat()}
    if isinstance(value, Decimal):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
