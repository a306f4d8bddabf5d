"""Request bodies and the structured error payload for the HTTP API."""

from __future__ import annotations

import time
from http import HTTPStatus
from typing import Any

from pydantic import BaseModel, ConfigDict

from contacts_service.core.errors import ValidationError

CONTACT_NAME_REQUIRED = "Contact name cannot be empty"
INVALID_CONTACT_DATA = "Invalid contact data provided."
NAME_FILTER_REQUIRED = "The 'nameFilter' parameter is mandatory and cannot be empty."
INVALID_NAME_FILTER = "The provided nameFilter is an invalid regular expression: "


class ContactCreateRequest(BaseModel):
    """Body of ``POST /hello/contacts``."""

    model_config = ConfigDict(extra="ignore")

    name: str | None = None

    def require_name(self) -> str:
        """Return the name, or raise if it is missing or blank."""
        if self.name is None or not self.name.strip():
            raise ValidationError(CONTACT_NAME_REQUIRED)
        return self.name


def error_body(status: int, message: str, path: str) -> dict[str, Any]:
    """``{timestamp, status, error, message, path}`` with epoch-ms timestamp."""
    return {
        "timestamp": int(time.time() * 1000),
        "status": status,
        "error": HTTPStatus(status).phrase,
        "message": message,
        "path": path,
    }
