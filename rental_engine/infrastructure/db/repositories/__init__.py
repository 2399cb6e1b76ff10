from rental_engine.infrastructure.db.repositories.idempotency_repo_sql import IdempotencyRepoSQL
from rental_engine.infrastructure.db.repositories.rental_store_sql import RentalStoreSQL

__all__ = ["IdempotencyRepoSQL", "RentalStoreSQL"]
