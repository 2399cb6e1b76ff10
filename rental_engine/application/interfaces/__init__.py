"""Interfaces (Puertos) de la capa de aplicación."""

from rental_engine.application.interfaces.clock import Clock, FakeClock, SystemClock
from rental_engine.application.interfaces.idempotency_repo import (
    IdempotencyRecord,
    IdempotencyRepo,
)
from rental_engine.application.interfaces.rental_store import (
    OrderFilter,
    RentalStore,
    RequestFilter,
)
from rental_engine.application.interfaces.transaction_manager import TransactionManager
from rental_engine.application.interfaces.uuid_generator import (
    FakeUUIDGenerator,
    RealUUIDGenerator,
    UUIDGenerator,
)

__all__ = [
    # Repositories
    "RentalStore",
    "RequestFilter",
    "OrderFilter",
    "IdempotencyRepo",
    "IdempotencyRecord",
    # Infrastructure
    "TransactionManager",
    # Utilities
    "Clock",
    "SystemClock",
    "FakeClock",
    "UUIDGenerator",
    "RealUUIDGenerator",
    "FakeUUIDGenerator",
]
