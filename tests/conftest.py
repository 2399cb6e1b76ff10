"""
Pytest configuration and shared fixtures.

Este módulo provee fixtures reutilizables para:
- Almacenamiento en memoria con flota sembrada
- Reloj y generador de UUIDs deterministas
- Façade del ciclo de vida
- Cliente HTTP de prueba (httpx + ASGITransport)
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from rental_engine.api.dependencies import build_in_memory_bundle, get_clock, get_in_memory_bundle
from rental_engine.application.dtos.lifecycle_dto import (
    CreateOrderDTO,
    CreateRequestDTO,
    CustomerDTO,
)
from rental_engine.application.interfaces.clock import FakeClock
from rental_engine.application.interfaces.uuid_generator import FakeUUIDGenerator
from rental_engine.application.use_cases.lifecycle_facade import RentalLifecycleFacade
from rental_engine.domain.entities.vehicle import Vehicle
from rental_engine.main import app

# Lunes 1 de junio de 2026, 09:00 UTC
NOW = datetime(2026, 6, 1, 9, 0, tzinfo=timezone.utc)

# ============================================================================
# FIXTURES DE INFRAESTRUCTURA
# ============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture
def uuid_generator() -> FakeUUIDGenerator:
    return FakeUUIDGenerator()


@pytest_asyncio.fixture
async def bundle():
    """Store, idempotencia y transacciones en memoria con dos vehículos."""
    bundle = build_in_memory_bundle()
    store = bundle["store"]
    await store.add_vehicle(Vehicle(id="veh-1", name="Toyota Corolla", base_rate=Decimal("100")))
    await store.add_vehicle(
        Vehicle(id="veh-2", name="Mazda 3", base_rate=Decimal("200"), discount_percentage=Decimal("10"))
    )
    return bundle


@pytest.fixture
def store(bundle):
    return bundle["store"]


@pytest.fixture
def facade(bundle, clock, uuid_generator) -> RentalLifecycleFacade:
    return RentalLifecycleFacade(
        store=bundle["store"],
        idempotency_repo=bundle["idempotency_repo"],
        transaction_manager=bundle["tx_manager"],
        clock=clock,
        uuid_generator=uuid_generator,
        store_timeout_seconds=2.0,
        turnaround_hours=12,
    )


# ============================================================================
# FIXTURES DE DATOS DE PRUEBA
# ============================================================================


@pytest.fixture
def customer() -> CustomerDTO:
    return CustomerDTO(
        first_name="Ana",
        last_name="García",
        age=34,
        phone="+525512345678",
        email="ana@example.com",
    )


@pytest.fixture
def make_request_dto(customer):
    """Fábrica de CreateRequestDTO relativa a NOW."""

    def _make(
        vehicle_id: str = "veh-1",
        start_in_days: float = 2,
        days: float = 3,
        options: dict | None = None,
        comment: str | None = None,
    ) -> CreateRequestDTO:
        pickup = NOW + timedelta(days=start_in_days)
        return CreateRequestDTO(
            vehicle_id=vehicle_id,
            customer=customer,
            pickup_at=pickup,
            return_at=pickup + timedelta(days=days),
            options=options,
            comment=comment,
        )

    return _make


@pytest.fixture
def make_order_dto(customer):
    """Fábrica de CreateOrderDTO relativa a NOW."""

    def _make(
        vehicle_id: str = "veh-1",
        start_in_days: float = 2,
        days: float = 3,
        options: dict | None = None,
    ) -> CreateOrderDTO:
        pickup = NOW + timedelta(days=start_in_days)
        return CreateOrderDTO(
            vehicle_id=vehicle_id,
            customer=customer,
            pickup_at=pickup,
            return_at=pickup + timedelta(days=days),
            options=options,
        )

    return _make


# ============================================================================
# FIXTURES DE CLIENTE HTTP
# ============================================================================


@pytest_asyncio.fixture
async def client(bundle, clock):
    """
    Cliente HTTP contra la app con el store en memoria de la prueba.

    ASGITransport no ejecuta el lifespan: no hay worker ni flota de demo.
    """
    app.dependency_overrides[get_in_memory_bundle] = lambda: bundle
    app.dependency_overrides[get_clock] = lambda: clock

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def request_payload():
    """Payload de ejemplo para crear una solicitud."""
    pickup = NOW + timedelta(days=2)
    return {
        "vehicle_id": "veh-1",
        "customer": {
            "first_name": "Luis",
            "last_name": "Pérez",
            "age": 41,
            "phone": "+525598765432",
            "email": "luis@example.com",
        },
        "pickup_at": pickup.isoformat(),
        "return_at": (pickup + timedelta(days=3)).isoformat(),
        "options": {"unlimited_km": True},
        "comment": "Entrega en hotel",
    }


def pytest_configure(config):
    config.addinivalue_line(
        "markers",
        "integration: Tests contra SQLite real vía aiosqlite",
    )
