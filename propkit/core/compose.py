from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from pydantic.fields import FieldInfo

from .attachments import (
    CombinedAttachment,
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
from .builder import FieldBuilder
from .options import (
    MISSING,
    ArrayProperty,
    EachItem,
    PropertyOptions,
    SingularProperty,
    options_from_payload,
)

log = logging.getLogger("propkit.compose")


def _is_missing(value: Any) -> bool:
    return value is MISSING


def _is_null(value: Any) -> bool:
    return value is None


def _fill_missing(default: Any) -> Callable[[Any], Any]:
    def rewrite(value: Any) -> Any:
        # deep-copied per ingestion; instances never share the default
        return copy.deepcopy(default) if value is MISSING else value

    return rewrite


def compose(
    api_options: Optional[Mapping[str, Any]],
    options: Union[PropertyOptions, Mapping[str, Any], None],
    *attachments: Callable[[FieldBuilder], None],
) -> CombinedAttachment:
    """
    Fan one field declaration out into validation, defaulting and schema
    attachments.

    Bind order:
      caller attachments -> expose -> skip(absent) -> skip(None) -> is_array
      -> min size -> max size -> default -> equals -> api_property
    """
    if not isinstance(options, (SingularProperty, ArrayProperty)):
        options = options_from_payload(options)

    as_array = isinstance(options, ArrayProperty)
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    if as_array and options.bounds is not None:
        min_length, max_length = options.bounds.effective()

    constant = options.constant
    default = options.default

    parts: List[Callable[[FieldBuilder], None]] = [*attachments, expose(options.name)]
    if options.optional:
        parts.append(skip_if(_is_missing))
    if options.nullable:
        parts.append(skip_if(_is_null))
    if as_array:
        parts.append(is_array())
    if min_length is not None:
        parts.append(array_min_size(min_length))
    if max_length is not None:
        parts.append(array_max_size(max_length))
    if default is not MISSING:
        parts.append(transform(_fill_missing(default)))
    if isinstance(constant, EachItem):
        parts.append(equals(constant.value, each=True))
    elif constant is not MISSING:
        parts.append(equals(constant))

    facts: Dict[str, Any] = {}
    if isinstance(constant, EachItem):
        facts["enum"] = [{"each": True, "value": constant.value}]
        facts["items"] = {"enum": [constant.value]}
    elif constant is not MISSING:
        facts["enum"] = [constant]
    if min_length is not None:
        facts["minItems"] = min_length
    if max_length is not None:
        facts["maxItems"] = max_length
    if options.nullable:
        facts["nullable"] = True
    facts["isArray"] = as_array
    if options.name is not None:
        facts["name"] = options.name
    if options.description is not None:
        facts["description"] = options.description
    if options.example is not MISSING:
        facts["example"] = options.example
    if default is not MISSING:
        facts["default"] = default
    facts["required"] = not options.optional
    parts.append(api_property(facts, base=api_options))

    combined = apply_attachments(*parts)
    log.debug("compose name=%s kinds=%s", options.name, ",".join(combined.kinds))
    return combined


def api_field(
    api_options: Optional[Mapping[str, Any]],
    options: Union[PropertyOptions, Mapping[str, Any], None],
    *attachments: Callable[[FieldBuilder], None],
) -> FieldInfo:
    """Compose, bind to a fresh builder and return the pydantic field.

    Example:
        class CreateWidget(PropertyModel):
            tags: list[str] = api_field({}, ArrayProperty(bounds=ArrayBounds(max_length=5)))
    """
    builder = FieldBuilder()
    compose(api_options, options, *attachments)(builder)
    return builder.field_info()
