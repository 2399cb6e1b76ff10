from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from rental_engine.application.interfaces.transaction_manager import TransactionManager
from rental_engine.domain.errors import StoreUnavailableError
from rental_engine.infrastructure.db.retry import is_deadlock_error


class SQLAlchemyTransactionManager(TransactionManager):
    """
    Una transacción de base de datos por unidad de trabajo.

    Las fallas del driver se traducen a StoreUnavailableError; son
    reintentables cuando corresponden a un deadlock o lock timeout.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @asynccontextmanager
    async def start(self) -> AsyncIterator[None]:
        if self._session.in_transaction():
            yield
            return
        try:
            async with self._session.begin():
                yield
        except DBAPIError as exc:
            raise StoreUnavailableError(
                f"Falla del almacenamiento: {exc.orig or exc}",
                retryable=is_deadlock_error(exc),
            ) from exc
