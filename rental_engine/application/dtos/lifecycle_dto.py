"""DTOs del façade del ciclo de vida."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generic, TypeVar

from rental_engine.domain.entities.rental_order import OrderType
from rental_engine.domain.errors import DomainError, ErrorKind
from rental_engine.domain.value_objects.customer import Customer

T = TypeVar("T")


@dataclass
class CustomerDTO:
    """Datos del cliente tal como los envía el llamador."""

    first_name: str
    last_name: str
    age: int
    phone: str
    email: str | None = None

    def to_customer(self) -> Customer:
        return Customer(
            first_name=self.first_name,
            last_name=self.last_name,
            age=self.age,
            phone=self.phone,
            email=self.email,
        )


@dataclass
class CreateRequestDTO:
    vehicle_id: str
    customer: CustomerDTO
    pickup_at: datetime
    return_at: datetime
    options: dict[str, bool] | None = None
    comment: str | None = None


@dataclass
class EditRequestDTO:
    """Edición parcial: los campos en None conservan el valor actual."""

    request_id: str
    vehicle_id: str | None = None
    customer: CustomerDTO | None = None
    pickup_at: datetime | None = None
    return_at: datetime | None = None
    options: dict[str, bool] | None = None
    comment: str | None = None


@dataclass
class CreateOrderDTO:
    vehicle_id: str
    customer: CustomerDTO
    pickup_at: datetime
    return_at: datetime
    options: dict[str, bool] | None = None


@dataclass
class BoardEntry:
    """Fila del tablero combinado de órdenes y solicitudes."""

    entry_type: OrderType
    id: str
    vehicle_id: str
    vehicle_name: str
    customer_name: str
    pickup_at: datetime
    return_at: datetime
    amount: int
    status: str
    created_at: datetime | None


@dataclass
class UnavailablePeriod:
    order_id: str
    start: datetime
    end: datetime


@dataclass
class OperationResult(Generic[T]):
    """
    Resultado de una operación del façade.

    success=True con `data`, o success=False con el tipo de error y su
    detalle. Nunca ambos.
    """

    success: bool
    data: T | None = None
    error_kind: ErrorKind | None = None
    error_detail: str | None = None
    error_code: str | None = None

    @classmethod
    def ok(cls, data: Any = None) -> "OperationResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: DomainError) -> "OperationResult":
        return cls(
            success=False,
            error_kind=error.kind,
            error_detail=error.message,
            error_code=error.code,
        )
