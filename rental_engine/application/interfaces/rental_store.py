"""Interface RentalStore - Puerto de almacenamiento del ciclo de vida."""

from collections.abc import Iterable
from dataclasses import dataclass

from rental_engine.domain.entities.rental_order import OrderStatus, RentalOrder
from rental_engine.domain.entities.rental_request import RentalRequest, RequestStatus
from rental_engine.domain.entities.vehicle import Vehicle, VehicleStatus


@dataclass(frozen=True)
class RequestFilter:
    vehicle_id: str | None = None
    statuses: frozenset[RequestStatus] | None = None

    @classmethod
    def build(
        cls,
        vehicle_id: str | None = None,
        statuses: Iterable[RequestStatus] | None = None,
    ) -> "RequestFilter":
        return cls(vehicle_id=vehicle_id, statuses=frozenset(statuses) if statuses else None)

    def matches(self, request: RentalRequest) -> bool:
        if self.vehicle_id is not None and request.vehicle_id != self.vehicle_id:
            return False
        return self.statuses is None or request.status in self.statuses


@dataclass(frozen=True)
class OrderFilter:
    vehicle_id: str | None = None
    statuses: frozenset[OrderStatus] | None = None
    request_id: str | None = None

    @classmethod
    def build(
        cls,
        vehicle_id: str | None = None,
        statuses: Iterable[OrderStatus] | None = None,
        request_id: str | None = None,
    ) -> "OrderFilter":
        return cls(
            vehicle_id=vehicle_id,
            statuses=frozenset(statuses) if statuses else None,
            request_id=request_id,
        )

    def matches(self, order: RentalOrder) -> bool:
        if self.vehicle_id is not None and order.vehicle_id != self.vehicle_id:
            return False
        if self.request_id is not None and order.request_id != self.request_id:
            return False
        return self.statuses is None or order.status in self.statuses


class RentalStore:
    """
    Puerto para vehículos, solicitudes y órdenes.

    Las operaciones save_* reciben la versión esperada: None significa
    inserción; una versión distinta a la almacenada produce
    OptimisticLockError. Cada save retorna la entidad con su nueva versión.
    Los listados se retornan del más reciente al más antiguo.
    """

    async def get_vehicle(self, vehicle_id: str) -> Vehicle | None:
        raise NotImplementedError

    async def list_vehicles(self, include_deleted: bool = False) -> list[Vehicle]:
        raise NotImplementedError

    async def add_vehicle(self, vehicle: Vehicle) -> Vehicle:
        raise NotImplementedError

    async def get_request(self, request_id: str) -> RentalRequest | None:
        raise NotImplementedError

    async def list_requests(self, filter: RequestFilter | None = None) -> list[RentalRequest]:
        raise NotImplementedError

    async def get_order(self, order_id: str) -> RentalOrder | None:
        raise NotImplementedError

    async def list_orders(self, filter: OrderFilter | None = None) -> list[RentalOrder]:
        raise NotImplementedError

    async def save_request(
        self,
        request: RentalRequest,
        expected_version: int | None,
    ) -> RentalRequest:
        raise NotImplementedError

    async def save_order(
        self,
        order: RentalOrder,
        expected_version: int | None,
    ) -> RentalOrder:
        raise NotImplementedError

    async def save_vehicle_status(
        self,
        vehicle_id: str,
        status: VehicleStatus,
        expected_version: int,
    ) -> Vehicle:
        raise NotImplementedError
