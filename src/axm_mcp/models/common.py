"""Shared Pydantic building blocks for API payloads.

The API speaks camelCase JSON and evolves additively, so every model maps
snake_case attributes to camelCase aliases and ignores unknown fields.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base model for API payloads with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Paging(ApiModel):
    """Cursor paging block of a list response."""

    next_cursor: str | None = None
    limit: int | None = None


class Meta(ApiModel):
    """Metadata block of a list response."""

    paging: Paging | None = None


class ListMeta(ApiModel):
    """Mixin for list responses that carry a cursor in ``meta.paging``."""

    meta: Meta | None = None

    @property
    def next_cursor(self) -> str | None:
        """Return the cursor of the next page, or None on the last page."""
        if self.meta is None or self.meta.paging is None:
            return None
        return self.meta.paging.next_cursor or None


class ResourceIdentifier(ApiModel):
    """JSON:API resource identifier (``{"type": ..., "id": ...}``)."""

    type: str
    id: str


class Links(ApiModel):
    """JSON:API relationship links."""

    self_: str | None = Field(default=None, alias="self")
    related: str | None = None


__all__ = ["ApiModel", "Links", "ListMeta", "Meta", "Paging", "ResourceIdentifier"]
