from dataclasses import dataclass
from datetime import datetime


@dataclass
class IdempotencyRecord:
    scope: str
    idem_key: str
    request_hash: str
    reference_id: str
    created_at: datetime | None = None


class IdempotencyRepo:
    async def get(self, scope: str, idem_key: str) -> IdempotencyRecord | None:
        raise NotImplementedError

    async def save(self, record: IdempotencyRecord) -> None:
        raise NotImplementedError
