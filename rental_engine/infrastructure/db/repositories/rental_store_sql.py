from dataclasses import replace
from decimal import Decimal
from typing import Any

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from rental_engine.application.interfaces.rental_store import (
    OrderFilter,
    RentalStore,
    RequestFilter,
)
from rental_engine.domain.entities.rental_order import (
    OrderStatus,
    OrderType,
    PaymentStatus,
    RentalOrder,
)
from rental_engine.domain.entities.rental_request import RentalRequest, RequestStatus
from rental_engine.domain.entities.vehicle import Vehicle, VehicleStatus
from rental_engine.domain.errors import OptimisticLockError, VehicleNotFoundError
from rental_engine.domain.value_objects.customer import Customer
from rental_engine.domain.value_objects.option_set import OptionSet
from rental_engine.domain.value_objects.rental_interval import RentalInterval, as_utc
from rental_engine.infrastructure.db.tables import rental_orders, rental_requests, vehicles


def _utc_or_none(value):
    return as_utc(value) if value is not None else None


def _customer_from_row(row) -> Customer:
    return Customer(
        first_name=row["first_name"],
        last_name=row["last_name"],
        age=row["age"],
        phone=row["phone"],
        email=row["email"],
    )


def _customer_values(customer: Customer) -> dict[str, Any]:
    return {
        "first_name": customer.first_name,
        "last_name": customer.last_name,
        "age": customer.age,
        "phone": customer.phone,
        "email": customer.email,
    }


def _interval_from_row(row) -> RentalInterval:
    # Se reconstruye sin la regla de medianoche: el valor ya fue ajustado al guardarse.
    return RentalInterval(pickup_at=as_utc(row["pickup_at"]), return_at=as_utc(row["return_at"]))


def _vehicle_from_row(row) -> Vehicle:
    return Vehicle(
        id=row["id"],
        name=row["name"],
        base_rate=Decimal(str(row["base_rate"])),
        discount_percentage=Decimal(str(row["discount_percentage"] or 0)),
        status=VehicleStatus.parse(row["status"]),
        version=row["version"],
    )


def _request_from_row(row) -> RentalRequest:
    return RentalRequest(
        id=row["id"],
        vehicle_id=row["vehicle_id"],
        customer=_customer_from_row(row),
        interval=_interval_from_row(row),
        amount=row["amount"],
        options=OptionSet.parse(row["options"]),
        comment=row["comment"],
        status=RequestStatus.parse(row["status"]),
        rejection_reason=row["rejection_reason"],
        order_id=row["order_id"],
        created_at=_utc_or_none(row["created_at"]),
        updated_at=_utc_or_none(row["updated_at"]),
        version=row["version"],
    )


def _order_from_row(row) -> RentalOrder:
    return RentalOrder(
        id=row["id"],
        vehicle_id=row["vehicle_id"],
        request_id=row["request_id"],
        customer=_customer_from_row(row),
        interval=_interval_from_row(row),
        amount=row["amount"],
        daily_rate=Decimal(str(row["daily_rate"])),
        options=OptionSet.parse(row["options"]),
        status=OrderStatus.parse(row["status"]),
        order_type=OrderType(row["order_type"]),
        payment_status=PaymentStatus(row["payment_status"]),
        created_at=_utc_or_none(row["created_at"]),
        updated_at=_utc_or_none(row["updated_at"]),
        version=row["version"],
    )


class RentalStoreSQL(RentalStore):
    """
    RentalStore sobre SQLAlchemy Core.

    Las actualizaciones son condicionales sobre la columna version; cero
    filas afectadas significa que otra unidad de trabajo escribió primero.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _current_version(self, table, entity_id: str) -> int | None:
        result = await self._session.execute(select(table.c.version).where(table.c.id == entity_id))
        return result.scalar()

    async def _save(self, table, entity_name: str, entity_id: str, values: dict, expected_version: int | None) -> int:
        if expected_version is None:
            await self._session.execute(insert(table).values(id=entity_id, version=1, **values))
            return 1
        stmt = (
            update(table)
            .where(table.c.id == entity_id, table.c.version == expected_version)
            .values(version=expected_version + 1, **values)
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            actual = await self._current_version(table, entity_id)
            raise OptimisticLockError(entity_name, entity_id, expected_version, actual)
        return expected_version + 1

    # === Vehículos ===

    async def get_vehicle(self, vehicle_id: str) -> Vehicle | None:
        result = await self._session.execute(select(vehicles).where(vehicles.c.id == vehicle_id))
        row = result.mappings().first()
        return _vehicle_from_row(row) if row else None

    async def list_vehicles(self, include_deleted: bool = False) -> list[Vehicle]:
        stmt = select(vehicles).order_by(vehicles.c.id)
        if not include_deleted:
            stmt = stmt.where(vehicles.c.status != VehicleStatus.DELETED.value)
        result = await self._session.execute(stmt)
        return [_vehicle_from_row(row) for row in result.mappings().all()]

    async def add_vehicle(self, vehicle: Vehicle) -> Vehicle:
        await self._session.execute(
            insert(vehicles).values(
                id=vehicle.id,
                name=vehicle.name,
                base_rate=vehicle.base_rate,
                discount_percentage=vehicle.discount_percentage,
                status=vehicle.status.value,
                version=1,
            )
        )
        return replace(vehicle, version=1)

    async def save_vehicle_status(
        self, vehicle_id: str, status: VehicleStatus, expected_version: int
    ) -> Vehicle:
        stmt = (
            update(vehicles)
            .where(vehicles.c.id == vehicle_id, vehicles.c.version == expected_version)
            .values(status=status.value, version=expected_version + 1)
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            actual = await self._current_version(vehicles, vehicle_id)
            if actual is None:
                raise VehicleNotFoundError(vehicle_id)
            raise OptimisticLockError("vehículo", vehicle_id, expected_version, actual)
        vehicle = await self.get_vehicle(vehicle_id)
        if vehicle is None:
            raise VehicleNotFoundError(vehicle_id)
        return vehicle

    # === Solicitudes ===

    async def get_request(self, request_id: str) -> RentalRequest | None:
        result = await self._session.execute(select(rental_requests).where(rental_requests.c.id == request_id))
        row = result.mappings().first()
        return _request_from_row(row) if row else None

    async def list_requests(self, filter: RequestFilter | None = None) -> list[RentalRequest]:
        stmt = select(rental_requests).order_by(rental_requests.c.created_at.desc())
        if filter is not None:
            if filter.vehicle_id is not None:
                stmt = stmt.where(rental_requests.c.vehicle_id == filter.vehicle_id)
            if filter.statuses:
                stmt = stmt.where(rental_requests.c.status.in_([s.value for s in filter.statuses]))
        result = await self._session.execute(stmt)
        return [_request_from_row(row) for row in result.mappings().all()]

    async def save_request(self, request: RentalRequest, expected_version: int | None) -> RentalRequest:
        values = {
            "vehicle_id": request.vehicle_id,
            **_customer_values(request.customer),
            "pickup_at": request.interval.pickup_at,
            "return_at": request.interval.return_at,
            "options": request.options.to_dict(),
            "comment": request.comment,
            "amount": request.amount,
            "status": request.status.value,
            "rejection_reason": request.rejection_reason,
            "order_id": request.order_id,
            "created_at": request.created_at,
            "updated_at": request.updated_at,
        }
        version = await self._save(rental_requests, "solicitud", request.id, values, expected_version)
        return replace(request, version=version)

    # === Órdenes ===

    async def get_order(self, order_id: str) -> RentalOrder | None:
        result = await self._session.execute(select(rental_orders).where(rental_orders.c.id == order_id))
        row = result.mappings().first()
        return _order_from_row(row) if row else None

    async def list_orders(self, filter: OrderFilter | None = None) -> list[RentalOrder]:
        stmt = select(rental_orders).order_by(rental_orders.c.created_at.desc())
        if filter is not None:
            if filter.vehicle_id is not None:
                stmt = stmt.where(rental_orders.c.vehicle_id == filter.vehicle_id)
            if filter.request_id is not None:
                stmt = stmt.where(rental_orders.c.request_id == filter.request_id)
            if filter.statuses:
                stmt = stmt.where(rental_orders.c.status.in_([s.value for s in filter.statuses]))
        result = await self._session.execute(stmt)
        return [_order_from_row(row) for row in result.mappings().all()]

    async def save_order(self, order: RentalOrder, expected_version: int | None) -> RentalOrder:
        values = {
            "vehicle_id": order.vehicle_id,
            "request_id": order.request_id,
            **_customer_values(order.customer),
            "pickup_at": order.interval.pickup_at,
            "return_at": order.interval.return_at,
            "options": order.options.to_dict(),
            "amount": order.amount,
            "daily_rate": order.daily_rate,
            "status": order.status.value,
            "order_type": order.order_type.value,
            "payment_status": order.payment_status.value,
            "created_at": order.created_at,
            "updated_at": order.updated_at,
        }
        version = await self._save(rental_orders, "orden", order.id, values, expected_version)
        return replace(order, version=version)
