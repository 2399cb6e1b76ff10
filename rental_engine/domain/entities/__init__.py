"""Entidades del dominio de rentas."""

from rental_engine.domain.entities.rental_order import (
    OrderStatus,
    OrderType,
    PaymentStatus,
    RentalOrder,
)
from rental_engine.domain.entities.rental_request import RentalRequest, RequestStatus
from rental_engine.domain.entities.vehicle import Vehicle, VehicleStatus

__all__ = [
    "OrderStatus",
    "OrderType",
    "PaymentStatus",
    "RentalOrder",
    "RentalRequest",
    "RequestStatus",
    "Vehicle",
    "VehicleStatus",
]
