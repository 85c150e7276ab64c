from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    GetCoreSchemaHandler,
    GetJsonSchemaHandler,
    SerializationInfo,
    SerializerFunctionWrapHandler,
    model_serializer,
)
from pydantic.fields import FieldInfo
from pydantic_core import PydanticCustomError, PydanticKnownError, core_schema, to_jsonable_python

from .options import MISSING

log = logging.getLogger("propkit.builder")


SkipCondition = Callable[[Any], bool]
Rewrite = Callable[[Any], Any]
# A rule returns an error message, or None when the value passes.
Rule = Callable[[Any], Optional[str]]


def _missing() -> Any:
    return MISSING


def _jsonable(value: Any) -> Any:
    return to_jsonable_python(value, fallback=str)


class FieldBuilder:
    """Collects what attachments bind to one field.

    The builder doubles as a pydantic annotation: it wraps the field's own
    validation in the attachment pipeline and writes the published facts
    into the field's JSON schema.
    """

    def __init__(self) -> None:
        self.alias: Optional[str] = None
        self.skip_conditions: List[SkipCondition] = []
        self.transforms: List[Rewrite] = []
        self.rules: List[Rule] = []
        self.schema: Dict[str, Any] = {}
        self.item_schema: Dict[str, Any] = {}
        self.required: bool = False
        self.is_array: bool = False
        self.roles: List[str] = []
        self.applied: List[str] = []

    def __repr__(self) -> str:
        return f"FieldBuilder(alias={self.alias!r}, applied={self.applied!r})"

    def record(self, kind: str) -> None:
        self.applied.append(kind)
        log.debug("bind kind=%s position=%s", kind, len(self.applied))

    # -------------------------
    # Validation
    # -------------------------
    def run(self, value: Any, handler: Callable[[Any], Any]) -> Any:
        for rewrite in self.transforms:
            value = rewrite(value)

        if any(skip(value) for skip in self.skip_conditions):
            return None if value is MISSING else value

        if value is MISSING:
            raise PydanticKnownError("missing")

        value = handler(value)

        messages = [m for m in (rule(value) for rule in self.rules) if m]
        if messages:
            raise PydanticCustomError(
                "property_rule",
                "{messages}",
                {"messages": "; ".join(messages)},
            )
        return value

    def __get_pydantic_core_schema__(self, source_type: Any, handler: GetCoreSchemaHandler) -> core_schema.CoreSchema:
        return core_schema.no_info_wrap_validator_function(self.run, handler(source_type))

    # -------------------------
    # Schema
    # -------------------------
    def __get_pydantic_json_schema__(self, schema: core_schema.CoreSchema, handler: GetJsonSchemaHandler) -> Dict[str, Any]:
        json_schema = handler(schema)
        self.publish(json_schema)
        return json_schema

    def publish(self, json_schema: Dict[str, Any]) -> None:
        if self.is_array and "type" not in json_schema and "$ref" not in json_schema:
            json_schema["type"] = "array"

        for key, value in self.schema.items():
            json_schema[key] = _jsonable(value)

        if self.item_schema:
            items = json_schema.get("items")
            items = dict(items) if isinstance(items, dict) else {}
            items.update({k: _jsonable(v) for k, v in self.item_schema.items()})
            json_schema["items"] = items

    def field_info(self) -> FieldInfo:
        info = Field(default_factory=_missing, validate_default=True, alias=self.alias)
        info.metadata.append(self)
        return info


def field_builders(model: type[BaseModel]) -> Dict[str, FieldBuilder]:
    """Map of published field key (alias or attribute name) to its builder."""
    out: Dict[str, FieldBuilder] = {}
    for name, info in model.model_fields.items():
        for m in info.metadata:
            if isinstance(m, FieldBuilder):
                out[info.alias or name] = m
                break
    return out


def _publish_required(schema: Dict[str, Any], model: type[BaseModel]) -> None:
    required: List[str] = list(schema.get("required") or [])
    for key, builder in field_builders(model).items():
        if builder.required and key not in required:
            required.append(key)
    if required:
        schema["required"] = required


class PropertyModel(BaseModel):
    """Base model for composed fields.

    Publishes builder-level `required` flags in its schema, and leaves absent
    optional fields out of dumps so a dump validates back to the same model.
    """

    model_config = ConfigDict(json_schema_extra=_publish_required)

    @model_serializer(mode="wrap")
    def serialize_present(self, handler: SerializerFunctionWrapHandler, info: SerializationInfo):
        # optional fields that were never supplied stay absent on the way out
        data = handler(self)
        builders = field_builders(type(self))
        for name, field in type(self).model_fields.items():
            key = field.alias or name
            if key not in builders or name in self.model_fields_set:
                continue
            if getattr(self, name) is None:
                data.pop(key if info.by_alias else name, None)
        return data
