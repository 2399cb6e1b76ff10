import asyncio
import sys
from pathlib import Path

# Add project root to sys.path
project_root = Path(__file__).resolve().parent.parent
sys.path.append(str(project_root))

from rental_engine.api.deps import AsyncSessionLocal, engine  # noqa: E402
from rental_engine.infrastructure.db.engine import create_tables  # noqa: E402
from rental_engine.infrastructure.db.repositories.rental_store_sql import RentalStoreSQL  # noqa: E402
from rental_engine.infrastructure.db.transaction_manager import SQLAlchemyTransactionManager  # noqa: E402
from rental_engine.infrastructure.seed import seed_vehicles  # noqa: E402


async def seed():
    await create_tables(engine)
    print("Created all tables.")

    async with AsyncSessionLocal() as session:
        created = await seed_vehicles(RentalStoreSQL(session), SQLAlchemyTransactionManager(session))
    print(f"Seeded {created} vehicles.")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
