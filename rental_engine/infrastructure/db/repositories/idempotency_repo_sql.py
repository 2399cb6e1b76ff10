from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from rental_engine.application.interfaces.idempotency_repo import IdempotencyRecord, IdempotencyRepo
from rental_engine.domain.value_objects.rental_interval import as_utc
from rental_engine.infrastructure.db.tables import idempotency_keys


class IdempotencyRepoSQL(IdempotencyRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, scope: str, idem_key: str) -> IdempotencyRecord | None:
        stmt = (
            select(idempotency_keys)
            .where(
                idempotency_keys.c.scope == scope,
                idempotency_keys.c.idem_key == idem_key,
            )
            .limit(1)
        )
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        if not row:
            return None
        return IdempotencyRecord(
            scope=row["scope"],
            idem_key=row["idem_key"],
            request_hash=row["request_hash"],
            reference_id=row["reference_id"],
            created_at=as_utc(row["created_at"]) if row["created_at"] else None,
        )

    async def save(self, record: IdempotencyRecord) -> None:
        stmt = insert(idempotency_keys).values(
            scope=record.scope,
            idem_key=record.idem_key,
            request_hash=record.request_hash,
            reference_id=record.reference_id,
            created_at=record.created_at,
        )
        await self._session.execute(stmt)
