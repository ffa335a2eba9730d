"""Base schema configuration for lwm Pydantic models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """Base schema with strict validation defaults.

    Backend payloads use camelCase keys (``dayIndex``, ``isGlobal``); models
    accept them as well as the Python field names, and dump field names
    unless ``by_alias=True`` is passed.

    Note: extra="ignore" lets backend payloads carry fields the workflow does
    not read (audit columns, hrefs) without failing validation. Required
    fields are still validated.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        validate_assignment=True,
        validate_default=True,
        str_strip_whitespace=True,
        use_enum_values=True,
        strict=True,
    )
