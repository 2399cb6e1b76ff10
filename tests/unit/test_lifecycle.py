"""Tests de la máquina de estados y del estado derivado del vehículo."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from rental_engine.domain.entities.rental_order import OrderStatus, RentalOrder
from rental_engine.domain.entities.rental_request import RentalRequest, RequestStatus
from rental_engine.domain.entities.vehicle import Vehicle, VehicleStatus
from rental_engine.domain.errors import (
    IllegalTransitionError,
    ValidationError,
    VehicleUnavailableError,
)
from rental_engine.domain.lifecycle import (
    OrderAction,
    RequestAction,
    TransitionOutcome,
    derive_vehicle_status,
    ensure_bookable,
    find_overlap,
    plan_order_transition,
    plan_request_transition,
)
from rental_engine.domain.value_objects.customer import Customer
from rental_engine.domain.value_objects.rental_interval import RentalInterval

T0 = datetime(2026, 7, 1, 10, 0, tzinfo=timezone.utc)
CUSTOMER = Customer(first_name="Ana", last_name="García", age=30, phone="5551234")


def _request(status: RequestStatus) -> RentalRequest:
    return RentalRequest(
        id="req-1",
        vehicle_id="veh-1",
        customer=CUSTOMER,
        interval=RentalInterval.create(T0, T0 + timedelta(days=2)),
        amount=200,
        status=status,
    )


def _order(
    status: OrderStatus = OrderStatus.ACTIVE,
    order_id: str = "ord-1",
    start: datetime = T0,
    days: int = 2,
) -> RentalOrder:
    return RentalOrder(
        id=order_id,
        vehicle_id="veh-1",
        customer=CUSTOMER,
        interval=RentalInterval.create(start, start + timedelta(days=days)),
        amount=200,
        daily_rate=Decimal("100"),
        status=status,
    )


class TestRequestTransitions:
    @pytest.mark.parametrize(
        "status, action",
        [
            (RequestStatus.PENDING, RequestAction.APPROVE),
            (RequestStatus.PENDING, RequestAction.REJECT),
            (RequestStatus.APPROVED, RequestAction.REJECT),
            (RequestStatus.APPROVED, RequestAction.SET_PENDING),
            (RequestStatus.REJECTED, RequestAction.UNDO_REJECT),
            (RequestStatus.APPROVED, RequestAction.EXECUTE),
        ],
    )
    def test_defined_transitions_apply(self, status, action):
        assert plan_request_transition(_request(status), action) is TransitionOutcome.APPLY

    @pytest.mark.parametrize(
        "status, action",
        [
            (RequestStatus.APPROVED, RequestAction.APPROVE),
            (RequestStatus.REJECTED, RequestAction.REJECT),
            (RequestStatus.PENDING, RequestAction.SET_PENDING),
            (RequestStatus.PENDING, RequestAction.UNDO_REJECT),
            (RequestStatus.EXECUTED, RequestAction.EXECUTE),
        ],
    )
    def test_reaching_current_state_is_noop(self, status, action):
        assert plan_request_transition(_request(status), action) is TransitionOutcome.NOOP

    @pytest.mark.parametrize("action", list(RequestAction))
    def test_executed_is_terminal(self, action):
        assert plan_request_transition(_request(RequestStatus.EXECUTED), action) is TransitionOutcome.NOOP

    @pytest.mark.parametrize(
        "status, action",
        [
            (RequestStatus.REJECTED, RequestAction.APPROVE),
            (RequestStatus.REJECTED, RequestAction.SET_PENDING),
            (RequestStatus.PENDING, RequestAction.EXECUTE),
            (RequestStatus.APPROVED, RequestAction.UNDO_REJECT),
        ],
    )
    def test_undefined_transitions_fail(self, status, action):
        with pytest.raises(IllegalTransitionError) as exc_info:
            plan_request_transition(_request(status), action)

        assert exc_info.value.current_status == status.value


class TestOrderTransitions:
    def test_cancel_and_redo(self):
        assert plan_order_transition(_order(OrderStatus.ACTIVE), OrderAction.CANCEL) is TransitionOutcome.APPLY
        assert plan_order_transition(_order(OrderStatus.CANCELLED), OrderAction.REDO) is TransitionOutcome.APPLY

    def test_completed_is_terminal(self):
        for action in OrderAction:
            assert plan_order_transition(_order(OrderStatus.COMPLETED), action) is TransitionOutcome.NOOP

    def test_cancel_twice_is_noop(self):
        assert plan_order_transition(_order(OrderStatus.CANCELLED), OrderAction.CANCEL) is TransitionOutcome.NOOP

    def test_complete_cancelled_fails(self):
        with pytest.raises(IllegalTransitionError):
            plan_order_transition(_order(OrderStatus.CANCELLED), OrderAction.COMPLETE)


class TestOverlapSearch:
    def test_finds_active_overlap(self):
        interval = RentalInterval.create(T0 + timedelta(days=1), T0 + timedelta(days=4))

        assert find_overlap(interval, [_order()]).id == "ord-1"

    def test_ignores_cancelled_and_excluded_orders(self):
        interval = RentalInterval.create(T0 + timedelta(days=1), T0 + timedelta(days=4))
        orders = [_order(OrderStatus.CANCELLED, "ord-1"), _order(order_id="ord-2")]

        assert find_overlap(interval, orders, exclude_order_id="ord-2") is None


class TestVehicleStatus:
    def test_booked_while_order_in_progress(self):
        vehicle = Vehicle(id="veh-1", name="Test", base_rate=Decimal("100"))

        assert derive_vehicle_status(vehicle, [_order()], T0 + timedelta(hours=5)) == VehicleStatus.BOOKED

    def test_available_before_pickup(self):
        vehicle = Vehicle(id="veh-1", name="Test", base_rate=Decimal("100"), status=VehicleStatus.BOOKED)

        assert derive_vehicle_status(vehicle, [_order()], T0 - timedelta(hours=1)) == VehicleStatus.AVAILABLE

    @pytest.mark.parametrize("override", [VehicleStatus.MAINTENANCE, VehicleStatus.DELETED])
    def test_manual_status_is_kept(self, override):
        vehicle = Vehicle(id="veh-1", name="Test", base_rate=Decimal("100"), status=override)

        assert derive_vehicle_status(vehicle, [_order()], T0 + timedelta(hours=5)) == override

    def test_deleted_vehicle_is_not_bookable(self):
        vehicle = Vehicle(id="veh-1", name="Test", base_rate=Decimal("100"), status=VehicleStatus.DELETED)

        with pytest.raises(VehicleUnavailableError):
            ensure_bookable(vehicle)

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("borrowed", VehicleStatus.BOOKED),
            ("booked", VehicleStatus.BOOKED),
            ("maintenance", VehicleStatus.MAINTENANCE),
            ("", VehicleStatus.AVAILABLE),
            ("retired", VehicleStatus.AVAILABLE),
        ],
    )
    def test_status_parsing(self, raw, expected):
        assert VehicleStatus.parse(raw) == expected

    def test_effective_rate(self):
        vehicle = Vehicle(id="veh-1", name="Test", base_rate=Decimal("200"), discount_percentage=Decimal("15"))

        assert vehicle.effective_rate == Decimal("170")

    def test_discount_out_of_range_fails(self):
        with pytest.raises(ValidationError):
            Vehicle(id="veh-1", name="Test", base_rate=Decimal("200"), discount_percentage=Decimal("120"))


class TestCustomer:
    def test_fields_are_trimmed(self):
        customer = Customer(first_name=" Ana ", last_name="García", age=30, phone=" 555 ", email="  ")

        assert customer.first_name == "Ana"
        assert customer.phone == "555"
        assert customer.email is None
        assert customer.full_name == "Ana García"

    @pytest.mark.parametrize(
        "overrides",
        [{"first_name": "  "}, {"age": 0}, {"age": True}, {"email": "not-an-email"}],
    )
    def test_invalid_customer_fails(self, overrides):
        data = {"first_name": "Ana", "last_name": "García", "age": 30, "phone": "555", **overrides}

        with pytest.raises(ValidationError):
            Customer(**data)
