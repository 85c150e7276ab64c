"""
propkit: declare a model field once and fan it out into validation rules,
ingest-time defaulting and OpenAPI schema metadata.

    from propkit import ArrayBounds, ArrayProperty, PropertyModel, api_field

    class CreateWidget(PropertyModel):
        tags: list[str] = api_field(
            {"title": "Tags"},
            ArrayProperty(optional=True, bounds=ArrayBounds(min_length=1, max_length=5)),
        )
"""
from .core import *  # noqa: F401,F403
from .core import __all__  # noqa: F401

__version__ = "0.1.0"
