"""
Máquina de estados del ciclo de vida de solicitudes y órdenes.

Funciones puras sin I/O: el façade y la reconciliación las usan para
decidir cada transición antes de escribir.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from rental_engine.domain.entities.rental_order import OrderStatus, RentalOrder
from rental_engine.domain.entities.rental_request import RentalRequest, RequestStatus
from rental_engine.domain.entities.vehicle import Vehicle, VehicleStatus
from rental_engine.domain.errors import IllegalTransitionError, VehicleUnavailableError
from rental_engine.domain.value_objects.rental_interval import RentalInterval


class RequestAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    SET_PENDING = "set_pending"
    UNDO_REJECT = "undo_reject"
    EXECUTE = "execute"


class OrderAction(str, Enum):
    COMPLETE = "complete"
    CANCEL = "cancel"
    REDO = "redo"


class TransitionOutcome(str, Enum):
    APPLY = "APPLY"
    NOOP = "NOOP"


@dataclass(frozen=True)
class Transition:
    sources: frozenset
    target: Enum


REQUEST_TRANSITIONS: dict[RequestAction, Transition] = {
    RequestAction.APPROVE: Transition(frozenset({RequestStatus.PENDING}), RequestStatus.APPROVED),
    RequestAction.REJECT: Transition(
        frozenset({RequestStatus.PENDING, RequestStatus.APPROVED}), RequestStatus.REJECTED
    ),
    RequestAction.SET_PENDING: Transition(frozenset({RequestStatus.APPROVED}), RequestStatus.PENDING),
    RequestAction.UNDO_REJECT: Transition(frozenset({RequestStatus.REJECTED}), RequestStatus.PENDING),
    RequestAction.EXECUTE: Transition(frozenset({RequestStatus.APPROVED}), RequestStatus.EXECUTED),
}

ORDER_TRANSITIONS: dict[OrderAction, Transition] = {
    OrderAction.COMPLETE: Transition(frozenset({OrderStatus.ACTIVE}), OrderStatus.COMPLETED),
    OrderAction.CANCEL: Transition(frozenset({OrderStatus.ACTIVE}), OrderStatus.CANCELLED),
    OrderAction.REDO: Transition(frozenset({OrderStatus.CANCELLED}), OrderStatus.ACTIVE),
}

TERMINAL_REQUEST_STATUSES = frozenset({RequestStatus.EXECUTED})
TERMINAL_ORDER_STATUSES = frozenset({OrderStatus.COMPLETED})


def _plan(
    entity: str,
    current: Enum,
    action: Enum,
    transition: Transition,
    terminal: frozenset,
) -> TransitionOutcome:
    if current == transition.target or current in terminal:
        return TransitionOutcome.NOOP
    if current in transition.sources:
        return TransitionOutcome.APPLY
    raise IllegalTransitionError(entity, current.value, action.value)


def plan_request_transition(request: RentalRequest, action: RequestAction) -> TransitionOutcome:
    """
    Decide si la acción se aplica a la solicitud.

    Returns:
        APPLY si la transición es válida; NOOP si el estado destino ya se
        alcanzó o la solicitud está en un estado terminal.

    Raises:
        IllegalTransitionError: cualquier otra transición no definida.
    """
    return _plan(
        "solicitud",
        request.status,
        action,
        REQUEST_TRANSITIONS[action],
        TERMINAL_REQUEST_STATUSES,
    )


def plan_order_transition(order: RentalOrder, action: OrderAction) -> TransitionOutcome:
    """Equivalente de plan_request_transition para órdenes."""
    return _plan(
        "orden",
        order.status,
        action,
        ORDER_TRANSITIONS[action],
        TERMINAL_ORDER_STATUSES,
    )


def request_target(action: RequestAction) -> RequestStatus:
    return REQUEST_TRANSITIONS[action].target


def order_target(action: OrderAction) -> OrderStatus:
    return ORDER_TRANSITIONS[action].target


def find_overlap(
    interval: RentalInterval,
    orders: Iterable[RentalOrder],
    exclude_order_id: str | None = None,
) -> RentalOrder | None:
    """Retorna la primera orden ACTIVE cuyo intervalo comparte algún instante."""
    for order in orders:
        if order.id == exclude_order_id or not order.is_active:
            continue
        if order.interval.overlaps(interval):
            return order
    return None


def ensure_bookable(vehicle: Vehicle) -> None:
    """Un vehículo eliminado no puede recibir órdenes nuevas ni reactivadas."""
    if vehicle.is_deleted:
        raise VehicleUnavailableError(vehicle.id, vehicle.status.value)


def derive_vehicle_status(
    vehicle: Vehicle,
    orders: Iterable[RentalOrder],
    now: datetime,
) -> VehicleStatus:
    """
    Estado derivado del vehículo.

    MAINTENANCE y DELETED se respetan; en otro caso BOOKED si alguna orden
    ACTIVE contiene `now`.
    """
    if vehicle.status.is_override:
        return vehicle.status
    for order in orders:
        if order.is_active and order.vehicle_id == vehicle.id and order.interval.contains(now):
            return VehicleStatus.BOOKED
    return VehicleStatus.AVAILABLE
