from rental_engine.application.use_cases.lifecycle_facade import RentalLifecycleFacade
from rental_engine.application.use_cases.reconcile_rentals import (
    ReconcileError,
    ReconcileRentalsUseCase,
    ReconcileReport,
)

__all__ = [
    "RentalLifecycleFacade",
    "ReconcileError",
    "ReconcileRentalsUseCase",
    "ReconcileReport",
]
