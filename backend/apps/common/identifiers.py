import uuid
from typing import Any, Optional


def parse_identifier(value: Any) -> Optional[uuid.UUID]:
    """
    Parse a caller supplied record identifier.

    Accepts ``uuid.UUID`` instances and strings in canonical or 32 character hex
    form. Anything else (``None``, numbers, malformed strings) yields ``None``.
    """
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str):
        return None
    candidate = value.strip()
    if len(candidate) not in (32, 36):
        return None
    try:
        return uuid.UUID(candidate)
    except ValueError:
        return None


def is_valid_identifier(value: Any) -> bool:
    return parse_identifier(value) is not None


def same_identifier(left: Any, right: Any) -> bool:
    """Compare two identifiers by their canonical string form."""
    left_id = parse_identifier(left)
    right_id = parse_identifier(right)
    if left_id is None or right_id is None:
        return False
    return str(left_id) == str(right_id)


__all__ = ["parse_identifier", "is_valid_identifier", "same_identifier"]
