"""Value Objects del dominio de rentas."""

from rental_engine.domain.value_objects.customer import Customer
from rental_engine.domain.value_objects.option_set import OptionKey, OptionSet
from rental_engine.domain.value_objects.rental_interval import RentalInterval, as_utc

__all__ = [
    "Customer",
    "OptionKey",
    "OptionSet",
    "RentalInterval",
    "as_utc",
]
