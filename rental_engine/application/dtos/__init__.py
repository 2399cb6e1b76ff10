"""DTOs (Data Transfer Objects) de la capa de aplicación."""

from rental_engine.application.dtos.lifecycle_dto import (
    BoardEntry,
    CreateOrderDTO,
    CreateRequestDTO,
    CustomerDTO,
    EditRequestDTO,
    OperationResult,
    UnavailablePeriod,
)

__all__ = [
    "BoardEntry",
    "CreateOrderDTO",
    "CreateRequestDTO",
    "CustomerDTO",
    "EditRequestDTO",
    "OperationResult",
    "UnavailablePeriod",
]
