from rental_engine.infrastructure.in_memory.idempotency_repo import InMemoryIdempotencyRepo
from rental_engine.infrastructure.in_memory.rental_store import InMemoryRentalStore
from rental_engine.infrastructure.in_memory.transaction_manager import InMemoryTransactionManager

__all__ = [
    "InMemoryIdempotencyRepo",
    "InMemoryRentalStore",
    "InMemoryTransactionManager",
]
