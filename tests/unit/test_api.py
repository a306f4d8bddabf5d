"""Tests for the contacts HTTP server (aiohttp)."""

from __future__ import annotations

import pytest

from contacts_service.api import create_app
from contacts_service.api.schemas import (
    CONTACT_NAME_REQUIRED,
    INVALID_CONTACT_DATA,
    INVALID_NAME_FILTER,
    NAME_FILTER_REQUIRED,
)
from contacts_service.service import ContactService

CONTACTS = "/hello/contacts"


@pytest.fixture
def app(seeded_store, notifier, sim_clock):
    service = ContactService(seeded_store, notifier, clock=sim_clock)
    return create_app(service, notifier)


def _assert_error_body(body: dict, status: int, message: str) -> None:
    assert body["status"] == status
    assert body["message"] == message
    assert body["path"] == CONTACTS
    assert isinstance(body["timestamp"], int)
    assert body["error"]


# ===========================================================================
# POST /hello/contacts
# ===========================================================================

class TestCreateContact:
    async def test_created(self, app, aiohttp_client, memory_bus, notifier):
        client = await aiohttp_client(app)
        resp = await client.post(CONTACTS, json={"name": "New Contact"})
        assert resp.status == 201
        assert await resp.json() == {"id": 4, "name": "New Contact"}

        await notifier.stop()
        (event,) = memory_bus.get_history("contact-events")
        assert event.contact_id == 4

    async def test_blank_name(self, app, aiohttp_client):
        client = await aiohttp_client(app)
        resp = await client.post(CONTACTS, json={"name": "   "})
        assert resp.status == 400
        body = await resp.json()
        _assert_error_body(body, 400, CONTACT_NAME_REQUIRED)
        assert body["error"] == "Bad Request"

    async def test_missing_name(self, app, aiohttp_client):
        client = await aiohttp_client(app)
        resp = await client.post(CONTACTS, json={})
        assert resp.status == 400
        _assert_error_body(await resp.json(), 400, CONTACT_NAME_REQUIRED)

    async def test_malformed_json(self, app, aiohttp_client):
        client = await aiohttp_client(app)
        resp = await client.post(
            CONTACTS, data="{not json", headers={"Content-Type": "application/json"}
        )
        assert resp.status == 400
        _assert_error_body(await resp.json(), 400, INVALID_CONTACT_DATA)

    @pytest.mark.parametrize("payload", [[1, 2], "just a string", {"name": 5}])
    async def test_wrong_shape(self, app, aiohttp_client, payload):
        client = await aiohttp_client(app)
        resp = await client.post(CONTACTS, json=payload)
        assert resp.status == 400
        _assert_error_body(await resp.json(), 400, INVALID_CONTACT_DATA)

    async def test_storage_failure_is_500(self, failing_store, recording_notifier, aiohttp_client):
        app = create_app(ContactService(failing_store, recording_notifier))
        client = await aiohttp_client(app)

        resp = await client.post(CONTACTS, json={"name": "Jane"})

        assert resp.status == 500
        body = await resp.json()
        assert body["status"] == 500
        assert body["error"] == "Internal Server Error"
        assert recording_notifier.events == []

    async def test_broker_outage_still_201(self, memory_store, unreachable_notifier, aiohttp_client):
        app = create_app(ContactService(memory_store, unreachable_notifier))
        client = await aiohttp_client(app)

        resp = await client.post(CONTACTS, json={"name": "Jane"})

        assert resp.status == 201
        assert await resp.json() == {"id": 1, "name": "Jane"}


# ===========================================================================
# GET /hello/contacts
# ===========================================================================

class TestListContacts:
    async def test_excludes_matching(self, app, aiohttp_client):
        client = await aiohttp_client(app)
        resp = await client.get(CONTACTS, params={"nameFilter": "^J.*"})
        assert resp.status == 200
        assert await resp.json() == {"contacts": [{"id": 3, "name": "Bob"}]}

    async def test_no_matches_returns_everything(self, app, aiohttp_client):
        client = await aiohttp_client(app)
        resp = await client.get(CONTACTS, params={"nameFilter": "^Z"})
        data = await resp.json()
        assert [c["id"] for c in data["contacts"]] == [1, 2, 3]

    async def test_missing_filter(self, app, aiohttp_client):
        client = await aiohttp_client(app)
        resp = await client.get(CONTACTS)
        assert resp.status == 400
        _assert_error_body(await resp.json(), 400, NAME_FILTER_REQUIRED)

    async def test_blank_filter(self, app, aiohttp_client):
        client = await aiohttp_client(app)
        resp = await client.get(CONTACTS, params={"nameFilter": "  "})
        assert resp.status == 400
        _assert_error_body(await resp.json(), 400, NAME_FILTER_REQUIRED)

    async def test_invalid_regex(self, app, aiohttp_client, seeded_store):
        client = await aiohttp_client(app)
        resp = await client.get(CONTACTS, params={"nameFilter": "["})
        assert resp.status == 400
        body = await resp.json()
        assert body["message"].startswith(INVALID_NAME_FILTER)
        assert "unterminated character set" in body["message"]
        assert seeded_store.streams_opened == 0

    async def test_fetch_failure_is_500(self, broken_store, recording_notifier, aiohttp_client):
        app = create_app(ContactService(broken_store, recording_notifier))
        client = await aiohttp_client(app)

        resp = await client.get(CONTACTS, params={"nameFilter": "x"})

        assert resp.status == 500
        assert broken_store.open_streams == 0

    async def test_timeout_is_503(self, slow_store_factory, recording_notifier, aiohttp_client):
        store = slow_store_factory(["a", "b"], delay=0.5)
        app = create_app(ContactService(store, recording_notifier, list_timeout=0.05))
        client = await aiohttp_client(app)

        resp = await client.get(CONTACTS, params={"nameFilter": "x"})

        assert resp.status == 503
        assert (await resp.json())["error"] == "Service Unavailable"
        assert store.open_streams == 0


# ===========================================================================
# Misc
# ===========================================================================

class TestHealthAndTracing:
    async def test_health_reports_notifier(self, app, aiohttp_client):
        client = await aiohttp_client(app)
        resp = await client.get("/health")
        assert resp.status == 200
        data = await resp.json()
        assert data["status"] == "ok"
        assert set(data["notifier"]) == {"queued", "published", "failed", "dropped", "attempt_errors"}

    async def test_health_without_notifier(self, seeded_store, recording_notifier, aiohttp_client):
        app = create_app(ContactService(seeded_store, recording_notifier))
        client = await aiohttp_client(app)
        resp = await client.get("/health")
        assert await resp.json() == {"status": "ok"}

    async def test_trace_id_header(self, app, aiohttp_client):
        client = await aiohttp_client(app)
        first = await client.get("/health")
        second = await client.get("/health")
        assert first.headers["X-Trace-Id"]
        assert first.headers["X-Trace-Id"] != second.headers["X-Trace-Id"]
