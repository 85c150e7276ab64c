from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Mapping, Optional, Tuple, TypeVar, Union

T = TypeVar("T")


class _Missing:
    """Marks a value that was never supplied. Not the same thing as None."""

    _instance: Optional["_Missing"] = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> "_Missing":
        return self

    def __deepcopy__(self, memo: Dict[int, Any]) -> "_Missing":
        return self

    def __reduce__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


@dataclass(frozen=True)
class ArrayBounds:
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    length: Optional[int] = None  # exact size, wins over min/max

    def effective(self) -> Tuple[Optional[int], Optional[int]]:
        if self.length is not None:
            return self.length, self.length
        return self.min_length, self.max_length

    @classmethod
    def from_payload(cls, payload: Any) -> Optional["ArrayBounds"]:
        """
        Accepts:
          - True / None  -> any size
          - {"minLength": 1, "maxLength": 5}
          - {"length": 3}
        """
        if not isinstance(payload, Mapping):
            return None
        return cls(
            min_length=payload.get("minLength"),
            max_length=payload.get("maxLength"),
            length=payload.get("length"),
        )


@dataclass(frozen=True)
class EachItem(Generic[T]):
    value: T


@dataclass(frozen=True)
class BaseProperty:
    name: Optional[str] = None
    optional: bool = False
    nullable: bool = False
    description: Optional[str] = None
    # custom caller options; carried, never interpreted
    extra: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SingularProperty(BaseProperty, Generic[T]):
    example: Any = MISSING
    default: Any = MISSING
    constant: Any = MISSING

    def __post_init__(self) -> None:
        if isinstance(self.constant, EachItem):
            raise TypeError("EachItem constants are only valid on ArrayProperty")


@dataclass(frozen=True)
class ArrayProperty(BaseProperty, Generic[T]):
    example: Any = MISSING
    default: Any = MISSING
    constant: Any = MISSING  # a whole sequence, or EachItem
    bounds: Optional[ArrayBounds] = None


PropertyOptions = Union[SingularProperty, ArrayProperty]

_KNOWN_KEYS = frozenset(
    {"name", "optional", "nullable", "description", "example", "default", "constant", "isArray"}
)


def options_from_payload(payload: Optional[Mapping[str, Any]]) -> PropertyOptions:
    """
    Build a declaration from its wire form:
      {"name": "...", "optional": true, "nullable": true, "description": "...",
       "example": ..., "default": ..., "constant": ...,
       "isArray": true | {"minLength": 1, "maxLength": 5, "length": 3}}

    A {"each": true, "value": x} constant is only read as EachItem when
    isArray is set. Unknown keys are kept in `extra`.
    """
    if payload is None:
        return SingularProperty()
    if not isinstance(payload, Mapping):
        raise TypeError(f"property options must be a mapping, got {type(payload).__name__}")

    common: Dict[str, Any] = {
        "name": payload.get("name"),
        "optional": bool(payload.get("optional", False)),
        "nullable": bool(payload.get("nullable", False)),
        "description": payload.get("description"),
        "extra": {k: v for k, v in payload.items() if k not in _KNOWN_KEYS},
        "example": payload.get("example", MISSING),
        "default": payload.get("default", MISSING),
    }
    constant = payload.get("constant", MISSING)

    is_array = payload.get("isArray")
    # an empty bounds mapping still marks an array
    if is_array is None or is_array is False:
        return SingularProperty(constant=constant, **common)

    if isinstance(constant, Mapping) and constant.get("each") is True:
        constant = EachItem(constant.get("value"))
    return ArrayProperty(constant=constant, bounds=ArrayBounds.from_payload(is_array), **common)
