from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Dict

import pytest

from ticketdesk.core import Actor, FixedClock
from ticketdesk.infrastructure.container import ServiceContainer, build_memory_services
from ticketdesk.infrastructure.memory import MemoryStore
from ticketdesk.suppliers.domain import Supplier

T0 = datetime(2025, 3, 10, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(T0)


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def actor() -> Actor:
    return Actor(id="op-1", name="Ana Souza", role="operator")


@pytest.fixture
def other_actor() -> Actor:
    return Actor(id="op-2", name="Bruno Lima", role="manager")


@pytest.fixture
def services(store: MemoryStore, clock: FixedClock) -> ServiceContainer:
    return build_memory_services(store=store, clock=clock)


@pytest.fixture
def ticket_service(services: ServiceContainer):
    return services.tickets


@pytest.fixture
def registry(services: ServiceContainer):
    return services.suppliers


@pytest.fixture
async def carrier(registry, actor) -> Supplier:
    result = await registry.add_supplier(
        {"name": "FastNet Telecom", "category": "carrier", "sla_hours": 4},
        actor,
    )
    assert result.ok
    return result.value


@pytest.fixture
def ticket_fields() -> Callable[..., Dict[str, Any]]:
    def build(**overrides: Any) -> Dict[str, Any]:
        fields = {
            "title": "Link down at Central Station",
            "description": "Main fibre link dropped, validators offline.",
            "type": "internet-down",
            "priority": "high",
            "unit": "Central Station",
        }
        fields.update(overrides)
        return fields

    return build
