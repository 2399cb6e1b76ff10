"""
Calculadora de precios de renta.

Punto único de cálculo del monto de una renta. Toda la aritmética se hace
con Decimal y el redondeo se aplica una sola vez sobre el total.
"""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from rental_engine.domain.entities.vehicle import Vehicle
from rental_engine.domain.value_objects.option_set import OptionKey, OptionSet
from rental_engine.domain.value_objects.rental_interval import RentalInterval

# Recargo sobre tarifa × días fraccionales
PERCENTAGE_OPTIONS: dict[OptionKey, Decimal] = {
    OptionKey.UNLIMITED_KM: Decimal("0.5"),
    OptionKey.SPEED_LIMIT_INCREASE: Decimal("0.2"),
    OptionKey.TIRE_INSURANCE: Decimal("0.2"),
}

# Monto fijo por día completo
FIXED_DAILY_OPTIONS: dict[OptionKey, Decimal] = {
    OptionKey.PERSONAL_DRIVER: Decimal("800"),
    OptionKey.PRIORITY_SERVICE: Decimal("1000"),
    OptionKey.CHILD_SEAT: Decimal("100"),
    OptionKey.SIM_CARD: Decimal("100"),
    OptionKey.ROADSIDE_ASSISTANCE: Decimal("500"),
}

# (días mínimos, multiplicador), de mayor a menor
DURATION_DISCOUNTS: tuple[tuple[int, Decimal], ...] = (
    (8, Decimal("0.96")),
    (4, Decimal("0.98")),
)

HOURS_PER_DAY = Decimal(24)


@dataclass(frozen=True)
class PriceBreakdown:
    """Desglose de un precio calculado; sólo `total` está redondeado."""

    whole_days: int
    remainder_hours: int
    effective_rate: Decimal
    duration_multiplier: Decimal
    base_price: Decimal
    additional_costs: Decimal
    option_costs: dict[OptionKey, Decimal] = field(default_factory=dict)
    total: int = 0


class PricingCalculator:
    """
    Calcula el monto de una renta.

    1. D días completos y H horas sobrantes del intervalo.
    2. Tarifa efectiva = tarifa base con el descuento permanente.
    3. Descuento por duración sólo sobre la porción de días completos.
    4. Las horas sobrantes se cobran a la tarifa efectiva sin descuento.
    5. Opciones porcentuales sobre tarifa × (D + H/24), fijas × D.
    6. Redondeo único del total.
    """

    def __init__(
        self,
        percentage_options: dict[OptionKey, Decimal] | None = None,
        fixed_options: dict[OptionKey, Decimal] | None = None,
    ):
        self._percentage_options = percentage_options or PERCENTAGE_OPTIONS
        self._fixed_options = fixed_options or FIXED_DAILY_OPTIONS

    @staticmethod
    def duration_multiplier(whole_days: int) -> Decimal:
        for min_days, multiplier in DURATION_DISCOUNTS:
            if whole_days >= min_days:
                return multiplier
        return Decimal("1")

    def quote(self, vehicle: Vehicle, interval: RentalInterval, options: Any) -> PriceBreakdown:
        """
        Calcula el desglose completo del precio.

        Args:
            vehicle: Vehículo a rentar.
            interval: Intervalo de la renta.
            options: OptionSet, mapping o JSON; payloads malformados se
                tratan como "sin opciones".
        """
        option_set = OptionSet.parse(options)
        days = interval.whole_days
        hours = interval.remainder_hours
        rate = vehicle.effective_rate
        multiplier = self.duration_multiplier(days)

        base_price = rate * multiplier * days + (Decimal(hours) / HOURS_PER_DAY) * rate

        fractional_days = Decimal(days) + Decimal(hours) / HOURS_PER_DAY
        option_costs: dict[OptionKey, Decimal] = {}
        for key in option_set:
            if key in self._percentage_options:
                option_costs[key] = rate * fractional_days * self._percentage_options[key]
            elif key in self._fixed_options:
                option_costs[key] = self._fixed_options[key] * days
            else:
                option_costs[key] = Decimal("0")
        additional = sum(option_costs.values(), Decimal("0"))

        total = (base_price + additional).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return PriceBreakdown(
            whole_days=days,
            remainder_hours=hours,
            effective_rate=rate,
            duration_multiplier=multiplier,
            base_price=base_price,
            additional_costs=additional,
            option_costs=option_costs,
            total=int(total),
        )

    def compute_price(self, vehicle: Vehicle, interval: RentalInterval, options: Any) -> int:
        """Retorna el monto entero de la renta."""
        return self.quote(vehicle, interval, options).total


_default_calculator = PricingCalculator()


def compute_price(vehicle: Vehicle, interval: RentalInterval, options: Any = None) -> int:
    return _default_calculator.compute_price(vehicle, interval, options)
