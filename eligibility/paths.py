"""Record path resolution.

Resolves dotted paths ("products.quantity") against nested records.
Sequences along the path are broadcast: the rest of the path is resolved
against every element and the results are flattened one level.
"""

from typing import Any, List

from .config import DEFAULT_MAX_DEPTH
from .errors import EvaluationDepthError
from .types import UNDEFINED, ValueKind, classify


def split_path(path: str) -> List[str]:
    """Split a dotted path into ordered segments."""
    return path.split(".")


def resolve_by_path(record: Any, path: str, max_depth: int = DEFAULT_MAX_DEPTH) -> Any:
    """Get the value at `path` from `record`.

    Args:
        record: Nested mapping (or sequence of mappings)
        path: Dot-separated path like "user.address.city"
        max_depth: Limit on nested sequences broadcast through per segment

    Returns:
        The resolved value, UNDEFINED if the path does not exist, or a
        flat list when any segment broadcast over a sequence

    Raises:
        EvaluationDepthError: If sequences nest deeper than max_depth
    """
    current = record
    for part in split_path(path):
        current = _resolve_segment(current, part, max_depth, 0)
    return current


def _resolve_segment(current: Any, part: str, max_depth: int, depth: int) -> Any:
    if depth > max_depth:
        raise EvaluationDepthError(
            f"Path segment '{part}' nests deeper than {max_depth} sequences",
            max_depth=max_depth,
        )

    kind = classify(current)

    if kind is ValueKind.SEQUENCE:
        resolved = []
        for item in current:
            value = _resolve_segment(item, part, max_depth, depth + 1)
            if classify(value) is ValueKind.SEQUENCE:
                resolved.extend(value)
            else:
                resolved.append(value)
        return resolved

    if kind is ValueKind.MAPPING:
        return current.get(part, UNDEFINED)

    # Primitive, null or already undefined
    return UNDEFINED
