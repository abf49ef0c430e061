import pytest

from arch_token_metadata.codec import encode_create_attributes, encode_create_metadata, encode_update_metadata
from arch_token_metadata.constants import ATTR_TWITTER, MAX_ATTRIBUTES, WELL_KNOWN_ATTRIBUTES
from arch_token_metadata.errors import ValidationError
from arch_token_metadata.validation import (
    validate_attributes,
    validate_heap_frame,
    validate_metadata_fields,
    validate_optional_metadata_fields,
    validate_u32,
)


@pytest.mark.parametrize(
    "field,kwargs,limit",
    [
        ("name", {"name": "n" * 257}, 256),
        ("symbol", {"symbol": "S" * 17}, 16),
        ("image", {"image": "i" * 513}, 512),
        ("description", {"description": "d" * 513}, 512),
    ],
)
def test_metadata_caps_name_the_field(field, kwargs, limit):
    fields = {"name": "n", "symbol": "s", "image": "i", "description": "d"}
    fields.update(kwargs)
    with pytest.raises(ValidationError) as exc:
        validate_metadata_fields(**fields)
    assert exc.value.field == field
    assert exc.value.limit == limit
    assert str(exc.value).startswith(f"{field}:")


def test_metadata_caps_are_inclusive():
    validate_metadata_fields("n" * 256, "s" * 16, "i" * 512, "d" * 512)


def test_optional_fields_skip_absent_values():
    validate_optional_metadata_fields()
    validate_optional_metadata_fields(symbol="S" * 16)
    with pytest.raises(ValidationError):
        encode_update_metadata(symbol="S" * 17)


def test_non_string_field_rejected():
    with pytest.raises(ValidationError):
        encode_create_metadata("n", 12, "i", "d")


def test_too_many_attributes():
    data = [(f"k{i}", "v") for i in range(MAX_ATTRIBUTES + 1)]
    with pytest.raises(ValidationError) as exc:
        encode_create_attributes(data)
    assert exc.value.field == "attributes"
    assert exc.value.actual == MAX_ATTRIBUTES + 1


def test_exactly_max_attributes_accepted():
    validate_attributes([(f"k{i}", "v") for i in range(MAX_ATTRIBUTES)])


def test_attribute_key_too_long():
    with pytest.raises(ValidationError) as exc:
        validate_attributes([("ok", "v"), ("k" * 65, "v")])
    assert exc.value.field == "attributes[1].key"


def test_attribute_value_too_long():
    with pytest.raises(ValidationError) as exc:
        validate_attributes([("k", "v" * 241)])
    assert exc.value.field == "attributes[0].value"
    validate_attributes([("k" * 64, "v" * 240)])


def test_empty_attribute_key_or_value():
    with pytest.raises(ValidationError) as exc:
        validate_attributes([("", "v")])
    assert exc.value.field == "attributes[0].key"
    with pytest.raises(ValidationError) as exc:
        validate_attributes([("k", "")])
    assert exc.value.field == "attributes[0].value"


def test_attribute_must_be_a_pair():
    with pytest.raises(ValidationError):
        validate_attributes([("k", "v", "extra")])


def test_validation_error_is_a_value_error():
    with pytest.raises(ValueError):
        validate_attributes([("", "")])


@pytest.mark.parametrize("value", [-1, 2**32, True, 1.5])
def test_u32_bounds(value):
    with pytest.raises(ValidationError):
        validate_u32("units", value)


def test_heap_frame_granularity():
    validate_heap_frame(0)
    validate_heap_frame(32 * 1024)
    with pytest.raises(ValidationError) as exc:
        validate_heap_frame(123)
    assert exc.value.field == "heap_bytes"


def test_well_known_attribute_keys_are_valid():
    assert isinstance(WELL_KNOWN_ATTRIBUTES, frozenset)
    assert ATTR_TWITTER in WELL_KNOWN_ATTRIBUTES
    validate_attributes([(key, "x") for key in sorted(WELL_KNOWN_ATTRIBUTES)])
