"""Core domain model for the contacts service.

A :class:`Contact` is either a draft (``id is None``) or persisted (``id``
assigned by the store). There are no further transitions.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Contact(BaseModel):
    """A named contact record."""

    model_config = ConfigDict(frozen=True)

    id: int | None = Field(default=None, ge=1)  # assigned by the store only
    name: str

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    def to_dict(self) -> dict[str, int | str | None]:
        return {"id": self.id, "name": self.name}

    def __str__(self) -> str:
        return f"Contact [id={self.id}, name={self.name}]"
