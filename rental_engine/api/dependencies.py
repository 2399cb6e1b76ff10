from functools import lru_cache, partial

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from rental_engine.api.deps import AsyncSessionLocal
from rental_engine.application.interfaces.clock import Clock, SystemClock
from rental_engine.application.interfaces.uuid_generator import RealUUIDGenerator
from rental_engine.application.use_cases.lifecycle_facade import RentalLifecycleFacade
from rental_engine.application.use_cases.reconcile_rentals import (
    ReconcileRentalsUseCase,
    ReconcileReport,
)
from rental_engine.config import Settings, get_settings
from rental_engine.infrastructure.db.repositories.idempotency_repo_sql import IdempotencyRepoSQL
from rental_engine.infrastructure.db.repositories.rental_store_sql import RentalStoreSQL
from rental_engine.infrastructure.db.retry import retry_on_deadlock, with_deadlock_retry
from rental_engine.infrastructure.db.transaction_manager import SQLAlchemyTransactionManager
from rental_engine.infrastructure.in_memory.idempotency_repo import InMemoryIdempotencyRepo
from rental_engine.infrastructure.in_memory.rental_store import InMemoryRentalStore
from rental_engine.infrastructure.in_memory.transaction_manager import InMemoryTransactionManager
from rental_engine.infrastructure.scheduling.reconciliation_worker import (
    ReconcileRunner,
    ReconciliationWorker,
)


async def get_session(settings: Settings = Depends(get_settings)) -> AsyncSession | None:
    if settings.use_in_memory:
        yield None
        return
    async with AsyncSessionLocal() as session:
        yield session


def build_in_memory_bundle() -> dict:
    store = InMemoryRentalStore()
    idempotency_repo = InMemoryIdempotencyRepo()
    return {
        "store": store,
        "idempotency_repo": idempotency_repo,
        "tx_manager": InMemoryTransactionManager(store, idempotency_repo),
    }


@lru_cache(maxsize=1)
def get_in_memory_bundle() -> dict:
    return build_in_memory_bundle()


@lru_cache(maxsize=1)
def get_clock() -> Clock:
    return SystemClock()


def _retry_policy(settings: Settings):
    return partial(
        retry_on_deadlock,
        max_attempts=settings.deadlock_retry_attempts,
        base_delay=settings.deadlock_retry_base_delay,
    )


def get_facade(
    settings: Settings = Depends(get_settings),
    session: AsyncSession | None = Depends(get_session),
    bundle: dict = Depends(get_in_memory_bundle),
    clock: Clock = Depends(get_clock),
) -> RentalLifecycleFacade:
    if settings.use_in_memory:
        store = bundle["store"]
        idempotency_repo = bundle["idempotency_repo"]
        tx_manager = bundle["tx_manager"]
    else:
        if not session:
            raise RuntimeError("DB session not available")
        store = RentalStoreSQL(session)
        idempotency_repo = IdempotencyRepoSQL(session)
        tx_manager = SQLAlchemyTransactionManager(session)

    return RentalLifecycleFacade(
        store=store,
        idempotency_repo=idempotency_repo,
        transaction_manager=tx_manager,
        clock=clock,
        uuid_generator=RealUUIDGenerator(),
        retry=_retry_policy(settings),
        store_timeout_seconds=settings.store_timeout_seconds,
        turnaround_hours=settings.turnaround_hours,
    )


def _with_retry(settings: Settings):
    return with_deadlock_retry(
        max_attempts=settings.deadlock_retry_attempts,
        base_delay=settings.deadlock_retry_base_delay,
    )


def get_reconcile_runner(
    settings: Settings = Depends(get_settings),
    session: AsyncSession | None = Depends(get_session),
    bundle: dict = Depends(get_in_memory_bundle),
) -> ReconcileRunner:
    """Reconciliación bajo demanda, con el mismo reintento que el worker."""
    if settings.use_in_memory:
        return ReconcileRentalsUseCase(bundle["store"], bundle["tx_manager"]).execute
    if not session:
        raise RuntimeError("DB session not available")
    use_case = ReconcileRentalsUseCase(RentalStoreSQL(session), SQLAlchemyTransactionManager(session))
    return _with_retry(settings)(use_case.execute)


def build_reconcile_runner(settings: Settings) -> ReconcileRunner:
    """Función de reconciliación para el worker, fuera del ciclo de request."""
    if settings.use_in_memory:
        bundle = get_in_memory_bundle()
        return ReconcileRentalsUseCase(bundle["store"], bundle["tx_manager"]).execute

    @_with_retry(settings)
    async def run(now) -> ReconcileReport:
        async with AsyncSessionLocal() as session:
            use_case = ReconcileRentalsUseCase(RentalStoreSQL(session), SQLAlchemyTransactionManager(session))
            return await use_case.execute(now)

    return run


def build_worker(settings: Settings) -> ReconciliationWorker:
    return ReconciliationWorker(
        run_reconcile=build_reconcile_runner(settings),
        clock=get_clock(),
        interval_seconds=settings.reconcile_interval_seconds,
    )


def get_worker(request: Request) -> ReconciliationWorker | None:
    return getattr(request.app.state, "reconciliation_worker", None)
