"""Flota de demostración para desarrollo local."""

import logging
from decimal import Decimal

from rental_engine.application.interfaces.rental_store import RentalStore
from rental_engine.application.interfaces.transaction_manager import TransactionManager
from rental_engine.domain.entities.vehicle import Vehicle

logger = logging.getLogger(__name__)

DEMO_VEHICLES = (
    Vehicle(id="veh-001", name="Toyota Corolla", base_rate=Decimal("900")),
    Vehicle(id="veh-002", name="Mazda 3", base_rate=Decimal("1100"), discount_percentage=Decimal("10")),
    Vehicle(id="veh-003", name="Nissan X-Trail", base_rate=Decimal("1500")),
    Vehicle(id="veh-004", name="Kia Rio", base_rate=Decimal("700"), discount_percentage=Decimal("5")),
)


async def seed_vehicles(store: RentalStore, transaction_manager: TransactionManager) -> int:
    """Inserta los vehículos de demostración que aún no existen."""
    created = 0
    async with transaction_manager.start():
        for vehicle in DEMO_VEHICLES:
            if await store.get_vehicle(vehicle.id) is None:
                await store.add_vehicle(vehicle)
                created += 1
    logger.info("Vehículos de demostración sembrados", extra={"seeded_count": created})
    return created
