import copy
from datetime import datetime, timezone

from rental_engine.application.interfaces.rental_store import (
    OrderFilter,
    RentalStore,
    RequestFilter,
)
from rental_engine.domain.entities.rental_order import RentalOrder
from rental_engine.domain.entities.rental_request import RentalRequest
from rental_engine.domain.entities.vehicle import Vehicle, VehicleStatus
from rental_engine.domain.errors import OptimisticLockError, VehicleNotFoundError

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _newest_first(items: list) -> list:
    return sorted(items, key=lambda item: item.created_at or _EPOCH, reverse=True)


class InMemoryRentalStore(RentalStore):
    """Almacenamiento en memoria con filas versionadas; lecturas y escrituras trabajan sobre copias."""

    def __init__(self) -> None:
        self.vehicles: dict[str, Vehicle] = {}
        self.requests: dict[str, RentalRequest] = {}
        self.orders: dict[str, RentalOrder] = {}

    def snapshot(self) -> tuple[dict, dict, dict]:
        return copy.deepcopy((self.vehicles, self.requests, self.orders))

    def restore(self, state: tuple[dict, dict, dict]) -> None:
        self.vehicles, self.requests, self.orders = state

    @staticmethod
    def _check_version(entity: str, entity_id: str, current: int | None, expected: int | None) -> None:
        if expected is None:
            if current is not None:
                raise OptimisticLockError(entity, entity_id, 0, current)
            return
        if current != expected:
            raise OptimisticLockError(entity, entity_id, expected, current)

    async def get_vehicle(self, vehicle_id: str) -> Vehicle | None:
        vehicle = self.vehicles.get(vehicle_id)
        return copy.deepcopy(vehicle) if vehicle else None

    async def list_vehicles(self, include_deleted: bool = False) -> list[Vehicle]:
        return [
            copy.deepcopy(v)
            for v in sorted(self.vehicles.values(), key=lambda v: v.id)
            if include_deleted or not v.is_deleted
        ]

    async def add_vehicle(self, vehicle: Vehicle) -> Vehicle:
        existing = self.vehicles.get(vehicle.id)
        self._check_version("vehículo", vehicle.id, existing.version if existing else None, None)
        stored = copy.deepcopy(vehicle)
        stored.version = 1
        self.vehicles[vehicle.id] = stored
        return copy.deepcopy(stored)

    async def get_request(self, request_id: str) -> RentalRequest | None:
        request = self.requests.get(request_id)
        return copy.deepcopy(request) if request else None

    async def list_requests(self, filter: RequestFilter | None = None) -> list[RentalRequest]:
        matched = [r for r in self.requests.values() if filter is None or filter.matches(r)]
        return [copy.deepcopy(r) for r in _newest_first(matched)]

    async def get_order(self, order_id: str) -> RentalOrder | None:
        order = self.orders.get(order_id)
        return copy.deepcopy(order) if order else None

    async def list_orders(self, filter: OrderFilter | None = None) -> list[RentalOrder]:
        matched = [o for o in self.orders.values() if filter is None or filter.matches(o)]
        return [copy.deepcopy(o) for o in _newest_first(matched)]

    async def save_request(self, request: RentalRequest, expected_version: int | None) -> RentalRequest:
        current = self.requests.get(request.id)
        self._check_version("solicitud", request.id, current.version if current else None, expected_version)
        stored = copy.deepcopy(request)
        stored.version = (current.version if current else 0) + 1
        self.requests[stored.id] = stored
        return copy.deepcopy(stored)

    async def save_order(self, order: RentalOrder, expected_version: int | None) -> RentalOrder:
        current = self.orders.get(order.id)
        self._check_version("orden", order.id, current.version if current else None, expected_version)
        stored = copy.deepcopy(order)
        stored.version = (current.version if current else 0) + 1
        self.orders[stored.id] = stored
        return copy.deepcopy(stored)

    async def save_vehicle_status(
        self, vehicle_id: str, status: VehicleStatus, expected_version: int
    ) -> Vehicle:
        current = self.vehicles.get(vehicle_id)
        if current is None:
            raise VehicleNotFoundError(vehicle_id)
        self._check_version("vehículo", vehicle_id, current.version, expected_version)
        current.status = status
        current.version += 1
        return copy.deepcopy(current)
