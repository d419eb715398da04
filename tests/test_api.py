from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from ticketdesk.config import Settings
from ticketdesk.main import create_app

ACTOR = {"X-Actor-Id": "op-1", "X-Actor-Name": "Ana Souza", "X-Actor-Role": "operator"}


@pytest.fixture
async def client(services):
    app = create_app(settings=Settings(storage_backend="memory"), container=services)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http


@pytest.fixture
async def supplier_id(client) -> str:
    response = await client.post(
        "/suppliers",
        json={"name": "FastNet Telecom", "category": "carrier", "sla_hours": 4},
        headers=ACTOR,
    )
    assert response.status_code == 201
    return response.json()["id"]


async def open_ticket(client, **overrides) -> dict:
    payload = {
        "title": "Link down at Central Station",
        "description": "Main fibre link dropped, validators offline.",
        "type": "internet-down",
        "priority": "high",
        "unit": "Central Station",
    }
    payload.update(overrides)
    response = await client.post("/tickets", json=payload, headers=ACTOR)
    assert response.status_code == 201, response.text
    return response.json()


async def test_health(client) -> None:
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["checks"]["storage_backend"] == "memory"
    assert "X-Correlation-ID" in response.headers


async def test_correlation_id_is_echoed(client) -> None:
    response = await client.get("/", headers={"X-Correlation-ID": "abc-123"})
    assert response.headers["X-Correlation-ID"] == "abc-123"


async def test_create_and_fetch(client, supplier_id, clock) -> None:
    created = await open_ticket(client, supplier_id=supplier_id)

    assert created["status"] == "open"
    assert created["owner_name"] == "Ana Souza"
    assert created["sla"]["state"] == "critical"
    assert created["sla"]["hours_remaining"] == 4

    clock.advance(hours=3, minutes=30)
    sla = (await client.get(f"/tickets/{created['id']}/sla")).json()
    assert (sla["state"], sla["hours_remaining"], sla["minutes_remaining"]) == ("critical", 0, 30)

    clock.advance(hours=1, minutes=30)
    sla = (await client.get(f"/tickets/{created['id']}/sla")).json()
    assert (sla["state"], sla["hours_overdue"], sla["is_breached"]) == ("overdue", 1, True)


async def test_mutations_require_actor(client) -> None:
    response = await client.post("/tickets", json={"title": "x", "description": "y"})
    assert response.status_code == 400
    assert response.json()["detail"]["reason"] == "missing_actor"


async def test_validation_failures_map_to_422(client) -> None:
    response = await client.post(
        "/tickets",
        json={"title": "Printer", "description": "broken"},
        headers=ACTOR,
    )
    assert response.status_code == 422
    assert response.json()["detail"]["reason"] == "description_too_short"


async def test_status_change_flow(client) -> None:
    ticket = await open_ticket(client)

    response = await client.post(f"/tickets/{ticket['id']}/status", json={"status": "in-progress"}, headers=ACTOR)
    assert response.status_code == 200
    body = response.json()
    assert body["audit"] == "ok"
    assert body["ticket"]["status"] == "in-progress"
    assert body["ticket"]["interactions"][0]["type"] == "status-change"

    again = await client.post(f"/tickets/{ticket['id']}/status", json={"status": "in-progress"}, headers=ACTOR)
    assert again.status_code == 409
    assert again.json()["detail"]["reason"] == "no_op_transition"


async def test_patch_ignores_immutable_fields(client) -> None:
    ticket = await open_ticket(client)

    response = await client.patch(
        f"/tickets/{ticket['id']}",
        json={"sla_deadline": "2099-01-01T00:00:00Z", "created_at": "2000-01-01T00:00:00Z", "priority": "low"},
        headers=ACTOR,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["priority"] == "low"
    assert body["sla_deadline"] == ticket["sla_deadline"]
    assert body["created_at"] == ticket["created_at"]


async def test_interactions_and_timeline(client, clock) -> None:
    ticket = await open_ticket(client)
    await client.post(f"/tickets/{ticket['id']}/interactions", json={"message": "Called carrier"}, headers=ACTOR)
    clock.advance(minutes=2)
    response = await client.post(
        f"/tickets/{ticket['id']}/interactions",
        json={"message": "Carrier called back", "type": "supplier-callback"},
        headers=ACTOR,
    )
    assert response.status_code == 201

    timeline = (await client.get(f"/tickets/{ticket['id']}/interactions")).json()
    assert [e["message"] for e in timeline] == ["Carrier called back", "Called carrier"]

    blank = await client.post(f"/tickets/{ticket['id']}/interactions", json={"message": "   "}, headers=ACTOR)
    assert blank.status_code == 422


async def test_duplicate_summary_and_delete(client, supplier_id) -> None:
    ticket = await open_ticket(client, supplier_id=supplier_id, related_asset_id="validator-7")

    copy = await client.post(f"/tickets/{ticket['id']}/duplicate", headers=ACTOR)
    assert copy.status_code == 201
    assert copy.json()["title"].endswith(" (Copy)")
    assert copy.json()["sla_deadline"] == ticket["sla_deadline"]

    by_asset = (await client.get("/tickets/by-asset/validator-7")).json()
    assert len(by_asset) == 2

    summary = (await client.get("/tickets/summary")).json()
    assert summary["total_open"] == 2
    assert summary["open_by_supplier_category"] == {"carrier": 2}

    deleted = await client.delete(f"/tickets/{ticket['id']}", headers=ACTOR)
    assert deleted.status_code == 204
    assert (await client.get(f"/tickets/{ticket['id']}")).status_code == 404


async def test_supplier_routes(client, supplier_id) -> None:
    await client.post("/suppliers", json={"name": "Acme IT", "sla_hours": 8, "active": False}, headers=ACTOR)

    active = (await client.get("/suppliers", params={"active_only": True})).json()
    assert [s["name"] for s in active] == ["FastNet Telecom"]

    bad = await client.post("/suppliers", json={"name": "Broken", "sla_hours": 0}, headers=ACTOR)
    assert bad.status_code == 422
    assert (await client.post("/suppliers", json={"name": "Forever", "sla_hours": 10**8}, headers=ACTOR)).status_code == 422

    patched = await client.patch(f"/suppliers/{supplier_id}", json={"sla_hours": 6}, headers=ACTOR)
    assert patched.json()["sla_hours"] == 6
