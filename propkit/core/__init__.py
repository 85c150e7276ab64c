from .attachments import (
    Attachment,
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
from .builder import FieldBuilder, PropertyModel, field_builders
from .compose import api_field, compose
from .errors import PropertyError
from .options import (
    MISSING,
    ArrayBounds,
    ArrayProperty,
    EachItem,
    PropertyOptions,
    SingularProperty,
    options_from_payload,
)
from .roles import ROLE_ORDER, roles, visible_fields

__all__ = [
    "Attachment",
    "CombinedAttachment",
    "api_property",
    "apply_attachments",
    "array_max_size",
    "array_min_size",
    "equals",
    "expose",
    "is_array",
    "skip_if",
    "transform",
    "FieldBuilder",
    "PropertyModel",
    "field_builders",
    "api_field",
    "compose",
    "PropertyError",
    "MISSING",
    "ArrayBounds",
    "ArrayProperty",
    "EachItem",
    "PropertyOptions",
    "SingularProperty",
    "options_from_payload",
    "ROLE_ORDER",
    "roles",
    "visible_fields",
]
