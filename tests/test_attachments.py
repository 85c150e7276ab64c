import pytest
from pydantic_core import PydanticCustomError, PydanticKnownError

from propkit.core.attachments import (
    api_property,
    apply_attachments,
    array_max_size,
    array_min_size,
    equals,
    expose,
    is_array,
    skip_if,
    transform,
)
from propkit.core.errors import PropertyError
from propkit.core.options import MISSING


@pytest.mark.parametrize("bad", [-1, 1.5, "3", True, None])
def test_size_bounds_reject_malformed_values(bad):
    with pytest.raises(PropertyError):
        array_min_size(bad)
    with pytest.raises(PropertyError):
        array_max_size(bad)


def test_property_error_is_a_value_error():
    assert issubclass(PropertyError, ValueError)


def test_expose_rejects_empty_name():
    with pytest.raises(PropertyError):
        expose("")


def test_expose_none_keeps_field_name(bind):
    assert bind(expose(None)).alias is None
    assert bind(expose("renamed")).alias == "renamed"


def test_bound_attachments_are_recorded_in_order(bind):
    b = bind(apply_attachments(expose("x"), is_array(), array_min_size(1)))
    assert b.applied == ["expose", "is_array", "array_min_size"]


def test_rules_collect_every_failure(bind, passthrough):
    b = bind(apply_attachments(is_array(), array_min_size(2), equals([9])))

    with pytest.raises(PydanticCustomError) as exc:
        b.run("nope", passthrough)

    message = exc.value.message()
    assert "must be an array" in message
    assert "at least 2 elements" in message
    assert "must be equal to [9]" in message


def test_max_size_rule(bind, passthrough):
    b = bind(array_max_size(2))

    assert b.run([1, 2], passthrough) == [1, 2]
    with pytest.raises(PydanticCustomError):
        b.run([1, 2, 3], passthrough)


def test_equals_each_checks_elements(bind, passthrough):
    b = bind(equals(1, each=True))

    assert b.run([1, 1], passthrough) == [1, 1]
    assert b.run([], passthrough) == []
    with pytest.raises(PydanticCustomError) as exc:
        b.run([1, 2], passthrough)
    assert "each value" in exc.value.message()


def test_equals_each_on_scalar_compares_whole_value(bind, passthrough):
    b = bind(equals(1, each=True))

    assert b.run(1, passthrough) == 1
    with pytest.raises(PydanticCustomError):
        b.run(2, passthrough)


def test_transforms_run_in_bind_order(bind, passthrough):
    b = bind(apply_attachments(transform(lambda v: v + 1), transform(lambda v: v * 10)))
    assert b.run(1, passthrough) == 20


def test_skip_short_circuits_rules_but_not_transforms(bind, passthrough):
    b = bind(apply_attachments(
        skip_if(lambda v: v == "skip"),
        transform(lambda v: "skip" if v == "rewrite-me" else v),
        is_array(),
    ))

    assert b.run("rewrite-me", passthrough) == "skip"
    with pytest.raises(PydanticCustomError):
        b.run("other", passthrough)


def test_skipped_absent_value_becomes_none(bind, passthrough):
    b = bind(skip_if(lambda v: v is MISSING))
    assert b.run(MISSING, passthrough) is None


def test_unskipped_absent_value_is_missing(builder, passthrough):
    with pytest.raises(PydanticKnownError) as exc:
        builder.run(MISSING, passthrough)
    assert exc.value.type == "missing"


def test_handler_runs_before_rules(bind):
    b = bind(array_min_size(2))
    assert b.run((1, 2), list) == [1, 2]


def test_api_property_steers_builder(bind):
    b = bind(api_property({
        "name": "shown",
        "required": False,
        "isArray": True,
        "example": [1],
        "items": {"enum": [1]},
        "format": "int32",
    }))

    assert b.alias == "shown"
    assert b.required is False
    assert b.is_array is True
    assert b.schema == {"examples": [[1]], "format": "int32"}
    assert b.item_schema == {"enum": [1]}


def test_publish_writes_facts_into_schema(bind):
    b = bind(api_property({"isArray": True, "default": ("a",), "minItems": 1, "items": {"enum": ["a"]}}))
    schema = {}
    b.publish(schema)

    assert schema == {"type": "array", "default": ["a"], "minItems": 1, "items": {"enum": ["a"]}}


def test_publish_keeps_existing_item_schema(bind):
    b = bind(api_property({"items": {"enum": [1]}}))
    schema = {"type": "array", "items": {"type": "integer"}}
    b.publish(schema)

    assert schema["items"] == {"type": "integer", "enum": [1]}
