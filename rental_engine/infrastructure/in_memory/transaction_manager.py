import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from rental_engine.application.interfaces.transaction_manager import TransactionManager
from rental_engine.infrastructure.in_memory.idempotency_repo import InMemoryIdempotencyRepo
from rental_engine.infrastructure.in_memory.rental_store import InMemoryRentalStore


class InMemoryTransactionManager(TransactionManager):
    """
    Serializa las unidades de trabajo con un lock y restaura el estado
    previo si la unidad termina con una excepción (incluida la cancelación).
    """

    def __init__(self, store: InMemoryRentalStore, idempotency_repo: InMemoryIdempotencyRepo) -> None:
        self._store = store
        self._idempotency_repo = idempotency_repo
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def start(self) -> AsyncIterator[None]:
        async with self._lock:
            store_state = self._store.snapshot()
            idem_state = self._idempotency_repo.snapshot()
            try:
                yield
            except BaseException:
                self._store.restore(store_state)
                self._idempotency_repo.restore(idem_state)
                raise
