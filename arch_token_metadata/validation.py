"""Client-side mirror of the on-chain acceptance rules.

Every check is a hard cap: a failing field raises ``ValidationError`` naming
the field and the limit, nothing is truncated.
"""

from typing import Optional, Sequence, Tuple

from .constants import (
    DESCRIPTION_MAX_LEN,
    HEAP_FRAME_GRANULARITY,
    IMAGE_MAX_LEN,
    MAX_ATTRIBUTES,
    MAX_KEY_LENGTH,
    MAX_VALUE_LENGTH,
    NAME_MAX_LEN,
    SYMBOL_MAX_LEN,
    U32_MAX,
)
from .errors import ValidationError

METADATA_FIELD_LIMITS: Tuple[Tuple[str, int], ...] = (
    ("name", NAME_MAX_LEN),
    ("symbol", SYMBOL_MAX_LEN),
    ("image", IMAGE_MAX_LEN),
    ("description", DESCRIPTION_MAX_LEN),
)


def byte_len(value: str) -> int:
    return len(value.encode("utf-8"))


def check_max_len(field: str, value: str, limit: int) -> None:
    if not isinstance(value, str):
        raise ValidationError(field, f"expected str, got {type(value).__name__}", limit=limit)
    actual = byte_len(value)
    if actual > limit:
        raise ValidationError(field, f"too long ({actual} > {limit} bytes)", limit=limit, actual=actual)


def validate_metadata_fields(name: str, symbol: str, image: str, description: str) -> None:
    for (field, limit), value in zip(METADATA_FIELD_LIMITS, (name, symbol, image, description)):
        check_max_len(field, value, limit)


def validate_optional_metadata_fields(
    name: Optional[str] = None,
    symbol: Optional[str] = None,
    image: Optional[str] = None,
    description: Optional[str] = None,
) -> None:
    # Absent fields are left untouched on-chain, so only present ones are capped.
    for (field, limit), value in zip(METADATA_FIELD_LIMITS, (name, symbol, image, description)):
        if value is not None:
            check_max_len(field, value, limit)


def validate_attributes(data: Sequence[Tuple[str, str]]) -> None:
    count = len(data)
    if count > MAX_ATTRIBUTES:
        raise ValidationError(
            "attributes", f"too many attributes ({count} > {MAX_ATTRIBUTES})", limit=MAX_ATTRIBUTES, actual=count
        )
    for idx, pair in enumerate(data):
        try:
            key, value = pair
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"attributes[{idx}]", "expected a (key, value) pair") from exc
        if not key:
            raise ValidationError(f"attributes[{idx}].key", "must be non-empty")
        if not value:
            raise ValidationError(f"attributes[{idx}].value", "must be non-empty")
        check_max_len(f"attributes[{idx}].key", key, MAX_KEY_LENGTH)
        check_max_len(f"attributes[{idx}].value", value, MAX_VALUE_LENGTH)


def validate_u32(field: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(field, f"expected int, got {type(value).__name__}", limit=U32_MAX)
    if value < 0 or value > U32_MAX:
        raise ValidationError(field, f"out of u32 range ({value})", limit=U32_MAX, actual=value)


def validate_heap_frame(heap_bytes: int) -> None:
    validate_u32("heap_bytes", heap_bytes)
    if heap_bytes % HEAP_FRAME_GRANULARITY != 0:
        raise ValidationError(
            "heap_bytes",
            f"must be a multiple of {HEAP_FRAME_GRANULARITY} ({heap_bytes})",
            limit=HEAP_FRAME_GRANULARITY,
            actual=heap_bytes,
        )
