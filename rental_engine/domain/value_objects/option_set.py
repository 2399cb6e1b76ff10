"""Value Object OptionSet - opciones adicionales de una renta."""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from rental_engine.domain.errors import UnknownOptionError, ValidationError

logger = logging.getLogger(__name__)


class OptionKey(str, Enum):
    """Enumeración cerrada de opciones de renta."""

    UNLIMITED_KM = "unlimited_km"
    SPEED_LIMIT_INCREASE = "speed_limit_increase"
    TIRE_INSURANCE = "tire_insurance"
    PERSONAL_DRIVER = "personal_driver"
    PRIORITY_SERVICE = "priority_service"
    CHILD_SEAT = "child_seat"
    SIM_CARD = "sim_card"
    ROADSIDE_ASSISTANCE = "roadside_assistance"
    PICKUP_AT_ADDRESS = "pickup_at_address"
    RETURN_AT_ADDRESS = "return_at_address"
    AIRPORT_DELIVERY = "airport_delivery"

    @classmethod
    def resolve(cls, raw: str) -> "OptionKey | None":
        """Acepta el valor snake_case o el alias camelCase histórico."""
        try:
            return cls(raw)
        except ValueError:
            return _LEGACY_ALIASES.get(raw)


_LEGACY_ALIASES: dict[str, OptionKey] = {
    "unlimitedKm": OptionKey.UNLIMITED_KM,
    "speedLimitIncrease": OptionKey.SPEED_LIMIT_INCREASE,
    "tireInsurance": OptionKey.TIRE_INSURANCE,
    "personalDriver": OptionKey.PERSONAL_DRIVER,
    "priorityService": OptionKey.PRIORITY_SERVICE,
    "childSeat": OptionKey.CHILD_SEAT,
    "simCard": OptionKey.SIM_CARD,
    "roadsideAssistance": OptionKey.ROADSIDE_ASSISTANCE,
    "pickupAtAddress": OptionKey.PICKUP_AT_ADDRESS,
    "returnAtAddress": OptionKey.RETURN_AT_ADDRESS,
    "airportDelivery": OptionKey.AIRPORT_DELIVERY,
}


@dataclass(frozen=True)
class OptionSet:
    """
    Conjunto inmutable de opciones seleccionadas.

    Es la única representación tipada de las opciones; el almacenamiento
    la serializa con to_dict() y la recupera con parse().
    """

    selected: frozenset[OptionKey] = frozenset()

    def __contains__(self, key: object) -> bool:
        return key in self.selected

    def __iter__(self):
        return iter(sorted(self.selected, key=lambda k: k.value))

    def __len__(self) -> int:
        return len(self.selected)

    @classmethod
    def empty(cls) -> "OptionSet":
        return cls()

    @classmethod
    def of(cls, *keys: OptionKey) -> "OptionSet":
        return cls(selected=frozenset(keys))

    @classmethod
    def from_input(cls, values: Mapping[str, Any] | None) -> "OptionSet":
        """
        Construye desde datos del llamador, de forma estricta.

        Raises:
            UnknownOptionError: si alguna llave no pertenece a la enumeración.
            ValidationError: si algún valor no es booleano.
        """
        if values is None:
            return cls()
        selected: set[OptionKey] = set()
        for raw_key, flag in values.items():
            key = OptionKey.resolve(str(raw_key))
            if key is None:
                raise UnknownOptionError(str(raw_key))
            if not isinstance(flag, bool):
                raise ValidationError(f"options.{raw_key}", "debe ser booleano")
            if flag:
                selected.add(key)
        return cls(selected=frozenset(selected))

    @classmethod
    def parse(cls, raw: Any) -> "OptionSet":
        """
        Recupera opciones persistidas, de forma tolerante.

        Acepta un OptionSet, un mapping o un string JSON. Cualquier payload
        malformado se trata como "sin opciones"; las llaves desconocidas se
        ignoran.
        """
        if isinstance(raw, OptionSet):
            return raw
        if raw is None or raw == "":
            return cls()
        if isinstance(raw, (str, bytes)):
            try:
                raw = json.loads(raw)
            except ValueError:
                logger.warning("Opciones malformadas, se ignoran", extra={"raw_options": raw})
                return cls()
        if not isinstance(raw, Mapping):
            logger.warning("Opciones con tipo inesperado, se ignoran", extra={"raw_options": raw})
            return cls()
        selected = {
            key
            for key, flag in ((OptionKey.resolve(str(k)), v) for k, v in raw.items())
            if key is not None and flag is True
        }
        return cls(selected=frozenset(selected))

    def to_dict(self) -> dict[str, bool]:
        return {key.value: key in self.selected for key in OptionKey}
