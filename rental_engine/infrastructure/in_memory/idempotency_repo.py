import copy
from collections import defaultdict

from rental_engine.application.interfaces.idempotency_repo import IdempotencyRecord, IdempotencyRepo


class InMemoryIdempotencyRepo(IdempotencyRepo):
    def __init__(self) -> None:
        self._records: dict[str, dict[str, IdempotencyRecord]] = defaultdict(dict)

    def snapshot(self) -> dict[str, dict[str, IdempotencyRecord]]:
        return copy.deepcopy(self._records)

    def restore(self, state: dict[str, dict[str, IdempotencyRecord]]) -> None:
        self._records = state

    async def get(self, scope: str, idem_key: str) -> IdempotencyRecord | None:
        return self._records.get(scope, {}).get(idem_key)

    async def save(self, record: IdempotencyRecord) -> None:
        self._records[record.scope][record.idem_key] = record
