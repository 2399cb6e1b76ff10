"""Entidad RentalOrder - renta comprometida que bloquea el vehículo."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from rental_engine.domain.value_objects.customer import Customer
from rental_engine.domain.value_objects.option_set import OptionSet
from rental_engine.domain.value_objects.rental_interval import RentalInterval


class OrderStatus(str, Enum):
    """Estados posibles de una orden."""

    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @classmethod
    def parse(cls, raw: "str | OrderStatus | None") -> "OrderStatus":
        """Estados vacíos o desconocidos se interpretan como ACTIVE."""
        if isinstance(raw, OrderStatus):
            return raw
        try:
            return cls(str(raw or "").strip().upper())
        except ValueError:
            return cls.ACTIVE


class OrderType(str, Enum):
    """Tipo de la orden: reserva materializada o proyección de solicitud."""

    RENTAL = "RENTAL"  # reserva materializada (aprobación o reserva directa)
    REQUEST = "REQUEST"  # proyección de una solicitud, solo para el tablero


class PaymentStatus(str, Enum):
    """Estado de pago registrado (no se procesan pagos)."""

    PENDING = "PENDING"
    PAID = "PAID"


@dataclass
class RentalOrder:
    """
    Orden de renta.

    Una orden ACTIVE bloquea el vehículo durante su intervalo. request_id es
    None para reservas directas del administrador.
    """

    id: str
    vehicle_id: str
    customer: Customer
    interval: RentalInterval
    amount: int
    daily_rate: Decimal
    request_id: str | None = None
    options: OptionSet = field(default_factory=OptionSet)
    status: OrderStatus = OrderStatus.ACTIVE
    order_type: OrderType = OrderType.RENTAL
    payment_status: PaymentStatus = PaymentStatus.PENDING
    created_at: datetime | None = None
    updated_at: datetime | None = None
    version: int = 0

    @property
    def is_active(self) -> bool:
        return self.status == OrderStatus.ACTIVE
