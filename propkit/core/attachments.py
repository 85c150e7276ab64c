from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from .builder import FieldBuilder, Rewrite, SkipCondition
from .errors import PropertyError

Binder = Callable[[FieldBuilder], None]

# api_property keys that steer the builder instead of landing in the schema verbatim
_CONTROL_KEYS = frozenset({"name", "required", "isArray", "example", "items"})


@dataclass(frozen=True)
class Attachment:
    """One primitive behaviour bound to a field.

    `kind` names the primitive, `args` keeps its constructor arguments so a
    composed sequence can be inspected without binding it.
    """

    kind: str
    bind: Binder = field(repr=False)
    args: Mapping[str, Any] = field(default_factory=dict)

    def __call__(self, builder: FieldBuilder) -> None:
        builder.record(self.kind)
        self.bind(builder)


@dataclass(frozen=True)
class CombinedAttachment:
    parts: Tuple[Callable[[FieldBuilder], None], ...]

    @property
    def kinds(self) -> Tuple[str, ...]:
        return tuple(getattr(p, "kind", type(p).__name__) for p in self.parts)

    def __call__(self, builder: FieldBuilder) -> None:
        for part in self.parts:
            part(builder)


def apply_attachments(*attachments: Callable[[FieldBuilder], None]) -> CombinedAttachment:
    return CombinedAttachment(parts=tuple(attachments))


def _check_size(n: Any, what: str) -> int:
    if isinstance(n, bool) or not isinstance(n, int):
        raise PropertyError(f"{what} must be an integer, got {n!r}")
    if n < 0:
        raise PropertyError(f"{what} must be >= 0, got {n}")
    return n


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


# -------------------------
# Naming
# -------------------------
def expose(name: Optional[str] = None) -> Attachment:
    if name is not None and (not isinstance(name, str) or not name):
        raise PropertyError(f"exposed name must be a non-empty string, got {name!r}")

    def bind(b: FieldBuilder) -> None:
        if name is not None:
            b.alias = name

    return Attachment("expose", bind, {"name": name})


# -------------------------
# Validation
# -------------------------
def skip_if(predicate: SkipCondition) -> Attachment:
    """Skip every validation rule of the field while `predicate(value)` holds."""

    def bind(b: FieldBuilder) -> None:
        b.skip_conditions.append(predicate)

    return Attachment("skip_if", bind, {"predicate": predicate})


def is_array() -> Attachment:
    def rule(value: Any) -> Optional[str]:
        return None if _is_sequence(value) else "must be an array"

    def bind(b: FieldBuilder) -> None:
        b.is_array = True
        b.rules.append(rule)

    return Attachment("is_array", bind)


def array_min_size(n: int) -> Attachment:
    size = _check_size(n, "array_min_size")

    def rule(value: Any) -> Optional[str]:
        if _is_sequence(value) and len(value) >= size:
            return None
        return f"must contain at least {size} elements"

    def bind(b: FieldBuilder) -> None:
        b.rules.append(rule)

    return Attachment("array_min_size", bind, {"size": size})


def array_max_size(n: int) -> Attachment:
    size = _check_size(n, "array_max_size")

    def rule(value: Any) -> Optional[str]:
        if _is_sequence(value) and len(value) <= size:
            return None
        return f"must contain no more than {size} elements"

    def bind(b: FieldBuilder) -> None:
        b.rules.append(rule)

    return Attachment("array_max_size", bind, {"size": size})


def _same(value: Any, expected: Any) -> bool:
    if _is_sequence(value) and _is_sequence(expected):
        return list(value) == list(expected)
    return value == expected


def equals(expected: Any, *, each: bool = False) -> Attachment:
    def rule(value: Any) -> Optional[str]:
        if each and isinstance(value, (list, tuple, set, frozenset)):
            if all(_same(v, expected) for v in value):
                return None
            return f"each value must be equal to {expected!r}"
        return None if _same(value, expected) else f"must be equal to {expected!r}"

    def bind(b: FieldBuilder) -> None:
        b.rules.append(rule)

    return Attachment("equals", bind, {"expected": expected, "each": each})


# -------------------------
# Transformation
# -------------------------
def transform(fn: Rewrite) -> Attachment:
    def bind(b: FieldBuilder) -> None:
        b.transforms.append(fn)

    return Attachment("transform", bind, {"fn": fn})


# -------------------------
# Schema metadata
# -------------------------
def api_property(options: Mapping[str, Any], base: Optional[Mapping[str, Any]] = None) -> Attachment:
    """
    Publish OpenAPI facts for the field.

    Interpreted keys of `options`:
      - name      -> property key (alias)
      - required  -> listed in the model's `required` (see PropertyModel)
      - isArray   -> field marked as array-shaped
      - example   -> `examples: [example]`
      - items     -> merged into the item schema
    Everything else is written to the field schema as given.

    `base` is forwarded to the schema verbatim and never interpreted; keys
    that `options` also sets are overridden.
    """
    facts: Dict[str, Any] = dict(options)
    # computed items merge into the forwarded item schema instead of replacing it
    forwarded: Dict[str, Any] = {
        k: v for k, v in (base or {}).items() if k not in facts or k == "items"
    }

    def bind(b: FieldBuilder) -> None:
        b.schema.update(forwarded)
        if facts.get("name"):
            b.alias = facts["name"]
        if "required" in facts:
            b.required = bool(facts["required"])
        if facts.get("isArray"):
            b.is_array = True
        if "example" in facts:
            b.schema["examples"] = [facts["example"]]
        if isinstance(facts.get("items"), Mapping):
            b.item_schema.update(facts["items"])
        for key, value in facts.items():
            if key not in _CONTROL_KEYS:
                b.schema[key] = value

    return Attachment("api_property", bind, {**forwarded, **facts})
