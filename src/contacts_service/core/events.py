"""Event schemas published by the contacts service.

All events inherit from BaseEvent and are Pydantic models. The wire form
uses camelCase aliases (``contactId``, ``createdAt``); Python code uses the
snake_case field names.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from .models import Contact


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class BaseEvent(BaseModel):
    """Base for all events. Provides identity and tracing."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    event_id: str = Field(default_factory=_uuid, exclude=True)
    trace_id: str = Field(default="", exclude=True)


class ContactCreatedEvent(BaseEvent):
    """Emitted once per successful contact creation."""

    contact_id: int = Field(alias="contactId", ge=1)
    name: str
    created_at: datetime = Field(default_factory=_now, alias="createdAt")

    @classmethod
    def from_contact(
        cls,
        contact: Contact,
        created_at: datetime | None = None,
        trace_id: str = "",
    ) -> ContactCreatedEvent:
        """Build the event for a contact the store has already persisted.

        Raises:
            ValueError: If the contact has no identifier yet.
        """
        if contact.id is None:
            raise ValueError("ContactCreatedEvent requires a persisted contact")
        return cls(
            contact_id=contact.id,
            name=contact.name,
            created_at=created_at or _now(),
            trace_id=trace_id,
        )

    def payload(self) -> dict[str, object]:
        """Wire payload: ``{contactId, name, createdAt}``."""
        return self.model_dump(mode="json", by_alias=True)
