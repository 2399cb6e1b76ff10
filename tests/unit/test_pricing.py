"""Tests de la calculadora de precios."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from rental_engine.domain.entities.vehicle import Vehicle
from rental_engine.domain.pricing import PricingCalculator, compute_price
from rental_engine.domain.value_objects.option_set import OptionKey, OptionSet
from rental_engine.domain.value_objects.rental_interval import RentalInterval

T0 = datetime(2026, 5, 4, 10, 0, tzinfo=timezone.utc)


def _vehicle(rate: str, discount: str = "0") -> Vehicle:
    return Vehicle(id="veh", name="Test", base_rate=Decimal(rate), discount_percentage=Decimal(discount))


def _interval(days: int = 0, hours: int = 0) -> RentalInterval:
    return RentalInterval.create(T0, T0 + timedelta(days=days, hours=hours))


class TestReferenceExamples:
    def test_eight_days_gets_long_duration_discount(self):
        # 100 × 0.96 × 8
        assert compute_price(_vehicle("100"), _interval(days=8)) == 768

    def test_hours_and_percentage_option(self):
        # base 200×3 + (12/24)×200 = 700; unlimited_km 200×3.5×0.5 = 350
        price = compute_price(_vehicle("200"), _interval(days=3, hours=12), {"unlimited_km": True})

        assert price == 1050


class TestDurationDiscount:
    @pytest.mark.parametrize(
        "days, multiplier",
        [(1, "1"), (3, "1"), (4, "0.98"), (7, "0.98"), (8, "0.96"), (30, "0.96")],
    )
    def test_multiplier_by_whole_days(self, days, multiplier):
        assert PricingCalculator.duration_multiplier(days) == Decimal(multiplier)

    def test_discount_applies_on_top_of_vehicle_discount(self):
        # tarifa efectiva 180; 180 × 0.98 × 4 = 705.6
        assert compute_price(_vehicle("200", discount="10"), _interval(days=4)) == 706

    def test_remainder_hours_are_not_discounted(self):
        breakdown = PricingCalculator().quote(_vehicle("240"), _interval(days=8, hours=6), None)

        # 240 × 0.96 × 8 + 6/24 × 240
        assert breakdown.base_price == Decimal("1843.2") + Decimal("60")
        assert breakdown.total == 1903


class TestOptions:
    def test_fixed_options_charge_per_whole_day(self):
        options = OptionSet.of(OptionKey.CHILD_SEAT, OptionKey.PERSONAL_DRIVER)

        # 100×2 + 5/24×100 + (100 + 800)×2 = 2020.83
        assert compute_price(_vehicle("100"), _interval(days=2, hours=5), options) == 2021

    def test_fixed_options_are_free_under_one_day(self):
        options = OptionSet.of(OptionKey.ROADSIDE_ASSISTANCE)

        # 5/24 × 240 = 50; asistencia × 0 días
        assert compute_price(_vehicle("240"), _interval(hours=5), options) == 50

    def test_options_without_price_cost_nothing(self):
        options = OptionSet.of(OptionKey.AIRPORT_DELIVERY, OptionKey.PICKUP_AT_ADDRESS)

        breakdown = PricingCalculator().quote(_vehicle("100"), _interval(days=2), options)

        assert breakdown.additional_costs == Decimal("0")
        assert breakdown.total == 200

    def test_malformed_options_are_treated_as_none(self):
        assert compute_price(_vehicle("100"), _interval(days=2), "{broken") == 200

    def test_breakdown_lists_each_option(self):
        options = OptionSet.of(OptionKey.TIRE_INSURANCE, OptionKey.SIM_CARD)

        breakdown = PricingCalculator().quote(_vehicle("100"), _interval(days=2), options)

        assert breakdown.option_costs[OptionKey.TIRE_INSURANCE] == Decimal("40.0")
        assert breakdown.option_costs[OptionKey.SIM_CARD] == Decimal("200")


class TestRounding:
    def test_single_half_up_rounding(self):
        # 3/24 × 100 = 12.5
        assert compute_price(_vehicle("100"), _interval(hours=3)) == 13

    def test_zero_rate_is_zero(self):
        assert compute_price(_vehicle("0"), _interval(days=5)) == 0


class TestProperties:
    @pytest.mark.parametrize("days, hours", [(1, 0), (2, 6), (3, 20), (4, 0), (5, 13), (9, 1)])
    def test_doubling_duration_never_decreases_price(self, days, hours):
        vehicle = _vehicle("150", discount="5")
        options = {"unlimited_km": True, "child_seat": True}
        single = _interval(days=days, hours=hours)
        doubled = RentalInterval.create(T0, T0 + 2 * single.duration)

        assert compute_price(vehicle, doubled, options) >= compute_price(vehicle, single, options)

    def test_deterministic(self):
        vehicle = _vehicle("123.45", discount="7.5")
        interval = _interval(days=6, hours=7)

        assert compute_price(vehicle, interval, {"tire_insurance": True}) == compute_price(
            vehicle, interval, {"tire_insurance": True}
        )
