from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Entities the frontend reads with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class SnakeModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class PartialUpdateModel(BaseModel):
    """
    Update payloads: every field optional, unknown keys ignored, and only the
    keys present in the request body are applied.
    """

    NON_NULLABLE: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def _reject_null_required_fields(self):
        explicit_nulls = [
            name
            for name in self.model_fields_set
            if name in self.NON_NULLABLE and getattr(self, name) is None
        ]
        if explicit_nulls:
            raise ValueError(f"Fields cannot be null: {', '.join(sorted(explicit_nulls))}")
        return self

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class MessageResponse(BaseModel):
    message: str


class SeedResponse(MessageResponse):
    inserted: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0
