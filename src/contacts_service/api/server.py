"""Contacts HTTP server.

Endpoints:
  POST /hello/contacts                : create a contact, 201 {id, name}
  GET  /hello/contacts?nameFilter=... : contacts whose name does NOT match
  GET  /health                        : liveness plus notifier counters

Input problems answer 400 with ``{timestamp, status, error, message,
path}``; storage failures answer 500 (503 when a listing times out).
"""

from __future__ import annotations

import json
from typing import Any

import structlog
from aiohttp import web
from pydantic import ValidationError as PydanticValidationError

from contacts_service.core.errors import (
    ListTimeoutError,
    PatternError,
    StorageError,
    ValidationError,
)
from contacts_service.notify.notifier import ContactEventNotifier
from contacts_service.observability.logger import get_logger, new_trace_id
from contacts_service.service import ContactService

from .schemas import (
    INVALID_CONTACT_DATA,
    INVALID_NAME_FILTER,
    NAME_FILTER_REQUIRED,
    ContactCreateRequest,
    error_body,
)

logger = get_logger(__name__)

CONTACTS_PATH = "/hello/contacts"

SERVICE_KEY = web.AppKey("service", ContactService)
NOTIFIER_KEY = web.AppKey("notifier", ContactEventNotifier)


def create_app(
    service: ContactService,
    notifier: ContactEventNotifier | None = None,
) -> web.Application:
    """Create the aiohttp web application for the contacts endpoints."""
    app = web.Application(middlewares=[trace_middleware])
    app[SERVICE_KEY] = service
    app[NOTIFIER_KEY] = notifier

    app.router.add_post(CONTACTS_PATH, handle_create_contact)
    app.router.add_get(CONTACTS_PATH, handle_list_contacts)
    app.router.add_get("/health", handle_health)
    return app


@web.middleware
async def trace_middleware(request: web.Request, handler):
    """Bind a fresh trace_id to every request's log lines."""
    trace_id = new_trace_id()
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        trace_id=trace_id, method=request.method, path=request.path
    )
    response = await handler(request)
    response.headers["X-Trace-Id"] = trace_id
    return response


def _error(status: int, message: str, path: str = CONTACTS_PATH) -> web.Response:
    return web.json_response(error_body(status, message, path), status=status)


# ---------------------------------------------------------------------------
# Contacts
# ---------------------------------------------------------------------------

async def handle_create_contact(request: web.Request) -> web.Response:
    """POST /hello/contacts: body ``{"name": "..."}``."""
    service = request.app[SERVICE_KEY]

    try:
        body = await request.json()
        name = ContactCreateRequest.model_validate(body).require_name()
    except (json.JSONDecodeError, UnicodeDecodeError, PydanticValidationError):
        logger.warning("create_contact.invalid_body")
        return _error(400, INVALID_CONTACT_DATA)
    except ValidationError as exc:
        logger.warning("create_contact.validation_failed", reason=exc.message)
        return _error(400, exc.message)

    logger.info("create_contact.received", name=name)
    try:
        contact = await service.create_contact(name)
    except StorageError:
        logger.exception("create_contact.storage_error")
        return _error(500, "Failed to persist contact.")

    logger.info("create_contact.succeeded", contact_id=contact.id)
    return web.json_response(contact.to_dict(), status=201)


async def handle_list_contacts(request: web.Request) -> web.Response:
    """GET /hello/contacts?nameFilter=<regex>: exclude matching names."""
    service = request.app[SERVICE_KEY]
    name_filter = request.query.get("nameFilter")

    if name_filter is None or not name_filter.strip():
        logger.warning("list_contacts.missing_filter")
        return _error(400, NAME_FILTER_REQUIRED)

    logger.info("list_contacts.received", name_filter=name_filter)
    try:
        result = await service.list_contacts_excluding(name_filter)
    except ListTimeoutError:
        logger.error("list_contacts.timeout", name_filter=name_filter)
        return _error(503, "Listing contacts timed out.")
    except StorageError:
        logger.exception("list_contacts.storage_error")
        return _error(500, "Failed to read contacts.")

    if isinstance(result, PatternError):
        logger.warning("list_contacts.invalid_pattern", name_filter=name_filter, detail=result.detail)
        return _error(400, INVALID_NAME_FILTER + result.detail)

    logger.info("list_contacts.succeeded", returned=len(result))
    return web.json_response({"contacts": [c.to_dict() for c in result]})


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

async def handle_health(request: web.Request) -> web.Response:
    """GET /health: simple health check."""
    notifier: ContactEventNotifier | None = request.app[NOTIFIER_KEY]
    body: dict[str, Any] = {"status": "ok"}
    if notifier is not None:
        body["notifier"] = notifier.snapshot()
    return web.json_response(body)


async def start_http_server(
    app: web.Application,
    host: str = "0.0.0.0",
    port: int = 8080,
) -> web.AppRunner:
    """Start serving *app*.

    Returns the runner for lifecycle management (call runner.cleanup() to stop).
    """
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    logger.info("http.started", host=host, port=port)
    return runner
