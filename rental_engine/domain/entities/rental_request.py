"""Entidad RentalRequest - solicitud de renta de un cliente."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from rental_engine.domain.value_objects.customer import Customer
from rental_engine.domain.value_objects.option_set import OptionSet
from rental_engine.domain.value_objects.rental_interval import RentalInterval


class RequestStatus(str, Enum):
    """Estados posibles de una solicitud."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    EXECUTED = "EXECUTED"

    @classmethod
    def parse(cls, raw: "str | RequestStatus | None") -> "RequestStatus":
        """Estados vacíos o desconocidos se interpretan como PENDING."""
        if isinstance(raw, RequestStatus):
            return raw
        try:
            return cls(str(raw or "").strip().upper())
        except ValueError:
            return cls.PENDING


@dataclass
class RentalRequest:
    """
    Solicitud de renta enviada por un cliente.

    order_id apunta a la orden materializada más reciente (si existe).
    El monto sólo cambia mediante una edición explícita.
    """

    id: str
    vehicle_id: str
    customer: Customer
    interval: RentalInterval
    amount: int
    options: OptionSet = field(default_factory=OptionSet)
    comment: str | None = None
    status: RequestStatus = RequestStatus.PENDING
    rejection_reason: str | None = None
    order_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    version: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.status == RequestStatus.EXECUTED
