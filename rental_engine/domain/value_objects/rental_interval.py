"""Value Object RentalInterval - intervalo de recogida/devolución."""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

from rental_engine.domain.errors import InvalidIntervalError

SECONDS_PER_DAY = 24 * 3600


def as_utc(value: datetime) -> datetime:
    """Normaliza un datetime a UTC; los datetimes naive se asumen en UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class RentalInterval:
    """
    Value Object inmutable con el instante de recogida y el de devolución.

    Invariante: return_at > pickup_at.

    Attributes:
        pickup_at: Fecha/hora de recogida (UTC).
        return_at: Fecha/hora de devolución (UTC).
    """

    pickup_at: datetime
    return_at: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "pickup_at", as_utc(self.pickup_at))
        object.__setattr__(self, "return_at", as_utc(self.return_at))
        if self.return_at <= self.pickup_at:
            raise InvalidIntervalError(
                f"La devolución debe ser posterior a la recogida: "
                f"{self.pickup_at.isoformat()} >= {self.return_at.isoformat()}"
            )

    @classmethod
    def create(cls, pickup_at: datetime, return_at: datetime) -> "RentalInterval":
        """
        Factory que aplica la regla de medianoche.

        Una devolución a las 00:00 se interpreta como el final del día
        anterior (23:59:59).
        """
        if return_at.time() == time(0, 0):
            return_at = return_at - timedelta(seconds=1)
        return cls(pickup_at=pickup_at, return_at=return_at)

    @classmethod
    def from_parts(
        cls,
        pickup_date: date,
        pickup_time: time,
        return_date: date,
        return_time: time,
        tz: timezone = timezone.utc,
    ) -> "RentalInterval":
        """Construye el intervalo desde fecha y hora por separado."""
        return cls.create(
            datetime.combine(pickup_date, pickup_time, tzinfo=tz),
            datetime.combine(return_date, return_time, tzinfo=tz),
        )

    @property
    def duration(self) -> timedelta:
        return self.return_at - self.pickup_at

    @property
    def whole_days(self) -> int:
        """Días completos transcurridos (D)."""
        return int(self.duration.total_seconds() // SECONDS_PER_DAY)

    @property
    def remainder_hours(self) -> int:
        """Horas sobrantes después de los días completos (H, 0-23)."""
        remainder = self.duration.total_seconds() - self.whole_days * SECONDS_PER_DAY
        return int(remainder // 3600)

    @property
    def total_days(self) -> Decimal:
        """D + H/24, usado por las opciones porcentuales."""
        return Decimal(self.whole_days) + Decimal(self.remainder_hours) / Decimal(24)

    def overlaps(self, other: "RentalInterval") -> bool:
        """Dos intervalos se superponen si comparten algún instante."""
        return self.pickup_at <= other.return_at and other.pickup_at <= self.return_at

    def contains(self, instant: datetime) -> bool:
        instant = as_utc(instant)
        return self.pickup_at <= instant <= self.return_at

    def extended(self, hours: float) -> "RentalInterval":
        """Retorna el intervalo ampliado al final (margen de preparación)."""
        return RentalInterval(
            pickup_at=self.pickup_at,
            return_at=self.return_at + timedelta(hours=hours),
        )

    def __str__(self) -> str:
        return f"{self.pickup_at.isoformat()} -> {self.return_at.isoformat()}"
