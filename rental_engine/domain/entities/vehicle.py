"""Entidad Vehicle - vehículo de la flota."""

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from rental_engine.domain.errors import ValidationError

logger = logging.getLogger(__name__)


class VehicleStatus(str, Enum):
    """Estados posibles de un vehículo."""

    AVAILABLE = "AVAILABLE"
    BOOKED = "BOOKED"
    MAINTENANCE = "MAINTENANCE"
    DELETED = "DELETED"

    @classmethod
    def parse(cls, raw: "str | VehicleStatus | None") -> "VehicleStatus":
        """
        Interpreta strings de estado, incluidos los valores históricos.

        "booked" y "borrowed" equivalen a BOOKED; vacío o desconocido cae
        en AVAILABLE.
        """
        if isinstance(raw, VehicleStatus):
            return raw
        if not raw:
            return cls.AVAILABLE
        normalized = str(raw).strip().upper()
        if normalized == "BORROWED":
            return cls.BOOKED
        try:
            return cls(normalized)
        except ValueError:
            logger.warning("Estado de vehículo desconocido, se asume AVAILABLE", extra={"raw_status": raw})
            return cls.AVAILABLE

    @property
    def is_override(self) -> bool:
        """MAINTENANCE y DELETED son fijados por un administrador."""
        return self in (VehicleStatus.MAINTENANCE, VehicleStatus.DELETED)


@dataclass
class Vehicle:
    """
    Vehículo rentable.

    Attributes:
        id: Identificador.
        name: Nombre comercial.
        base_rate: Tarifa diaria sin descuento.
        discount_percentage: Descuento en porcentaje (0-100).
        status: Estado actual.
        version: Versión para control optimista.
    """

    id: str
    name: str
    base_rate: Decimal
    discount_percentage: Decimal = Decimal("0")
    status: VehicleStatus = VehicleStatus.AVAILABLE
    version: int = 0

    def __post_init__(self) -> None:
        self.base_rate = Decimal(str(self.base_rate))
        self.discount_percentage = Decimal(str(self.discount_percentage or 0))
        self.status = VehicleStatus.parse(self.status)
        if self.base_rate < 0:
            raise ValidationError("base_rate", "no puede ser negativo")
        if not Decimal("0") <= self.discount_percentage <= Decimal("100"):
            raise ValidationError("discount_percentage", "debe estar entre 0 y 100")

    @property
    def effective_rate(self) -> Decimal:
        """Tarifa diaria con descuento aplicado."""
        return self.base_rate * (Decimal("1") - self.discount_percentage / Decimal("100"))

    @property
    def is_deleted(self) -> bool:
        return self.status == VehicleStatus.DELETED
