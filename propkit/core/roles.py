from __future__ import annotations

from typing import List

from pydantic import BaseModel

from .attachments import Attachment
from .builder import FieldBuilder, field_builders

# Role hierarchy (simple, extensible)
ROLE_ORDER = {
    "viewer": 1,
    "admin": 2,
}


def _check_role(role: str) -> str:
    if role not in ROLE_ORDER:
        raise ValueError(f"Unknown role: {role}")
    return role


def roles(*names: str) -> Attachment:
    """
    Marks a field as visible to the given roles (by hierarchy).
    Example:
      api_field({}, {"optional": True}, roles("admin"))
    """
    allowed = [_check_role(r) for r in names]

    def bind(b: FieldBuilder) -> None:
        b.roles.extend(r for r in allowed if r not in b.roles)
        b.schema["x-roles"] = list(b.roles)

    return Attachment("roles", bind, {"roles": tuple(allowed)})


def is_visible_to(builder: FieldBuilder, role: str) -> bool:
    _check_role(role)
    if not builder.roles:
        return True
    # allowed ["viewer"] => viewer/admin ok, allowed ["admin"] => admin only
    min_required = min(builder.roles, key=lambda r: ROLE_ORDER[r])
    return ROLE_ORDER[role] >= ROLE_ORDER[min_required]


def visible_fields(model: type[BaseModel], role: str) -> List[str]:
    """Published keys of `model` the role may see; unmarked fields are public."""
    _check_role(role)
    builders = field_builders(model)
    out: List[str] = []
    for name, info in model.model_fields.items():
        key = info.alias or name
        b = builders.get(key)
        if b is None or is_visible_to(b, role):
            out.append(key)
    return out
