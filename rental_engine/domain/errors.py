"""Excepciones de dominio para el motor de rentas."""

from enum import Enum


class ErrorKind(str, Enum):
    """Clasificación de errores expuesta a los llamadores del façade."""

    VALIDATION = "VALIDATION"
    CONFLICT = "CONFLICT"
    NOT_FOUND = "NOT_FOUND"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


class DomainError(Exception):
    """Clase base para todos los errores de dominio."""

    kind: ErrorKind = ErrorKind.CONFLICT

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


# === Errores de Validación ===


class ValidationError(DomainError):
    """Error de validación de datos de entrada."""

    kind = ErrorKind.VALIDATION

    def __init__(self, field: str, message: str):
        super().__init__(
            message=f"Validación fallida en '{field}': {message}",
            code="VALIDATION_ERROR",
        )
        self.field = field


class InvalidIntervalError(DomainError):
    """Rango de fechas de renta inválido."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str):
        super().__init__(message=message, code="INVALID_INTERVAL")


class UnknownOptionError(DomainError):
    """Opción de renta desconocida."""

    kind = ErrorKind.VALIDATION

    def __init__(self, option_key: str):
        super().__init__(
            message=f"Opción desconocida: {option_key}",
            code="UNKNOWN_OPTION",
        )
        self.option_key = option_key


# === Errores de Búsqueda ===


class NotFoundError(DomainError):
    """La entidad solicitada no existe."""

    kind = ErrorKind.NOT_FOUND


class VehicleNotFoundError(NotFoundError):
    def __init__(self, vehicle_id: str):
        super().__init__(
            message=f"Vehículo no encontrado: {vehicle_id}",
            code="VEHICLE_NOT_FOUND",
        )
        self.vehicle_id = vehicle_id


class RequestNotFoundError(NotFoundError):
    def __init__(self, request_id: str):
        super().__init__(
            message=f"Solicitud no encontrada: {request_id}",
            code="REQUEST_NOT_FOUND",
        )
        self.request_id = request_id


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: str):
        super().__init__(
            message=f"Orden no encontrada: {order_id}",
            code="ORDER_NOT_FOUND",
        )
        self.order_id = order_id


# === Errores de Conflicto ===


class ConflictError(DomainError):
    """La operación choca con el estado actual."""

    kind = ErrorKind.CONFLICT


class IllegalTransitionError(ConflictError):
    """El estado actual no permite la transición."""

    def __init__(self, entity: str, current_status: str, operation: str):
        super().__init__(
            message=f"No se puede {operation} {entity}: estado actual '{current_status}'",
            code="ILLEGAL_TRANSITION",
        )
        self.entity = entity
        self.current_status = current_status
        self.operation = operation


class OverlappingOrderError(ConflictError):
    """El vehículo ya tiene una orden activa que se superpone con el intervalo."""

    def __init__(self, vehicle_id: str, conflicting_order_id: str):
        super().__init__(
            message=f"El vehículo {vehicle_id} ya está reservado por la orden "
            f"{conflicting_order_id} en ese intervalo",
            code="OVERLAPPING_ORDER",
        )
        self.vehicle_id = vehicle_id
        self.conflicting_order_id = conflicting_order_id


class VehicleUnavailableError(ConflictError):
    """El vehículo no admite nuevas órdenes (eliminado)."""

    def __init__(self, vehicle_id: str, status: str):
        super().__init__(
            message=f"El vehículo {vehicle_id} no admite órdenes: estado '{status}'",
            code="VEHICLE_UNAVAILABLE",
        )
        self.vehicle_id = vehicle_id
        self.status = status


class DivergedLifecycleError(ConflictError):
    """La orden ya no está vinculada a una solicitud aprobada."""

    def __init__(self, order_id: str, request_id: str, request_status: str):
        super().__init__(
            message=f"La orden {order_id} pertenece a la solicitud {request_id} "
            f"en estado '{request_status}'; apruebe la solicitud de nuevo",
            code="DIVERGED_LIFECYCLE",
        )
        self.order_id = order_id
        self.request_id = request_id
        self.request_status = request_status


class OptimisticLockError(ConflictError):
    """Conflicto de concurrencia al actualizar una fila versionada."""

    def __init__(self, entity: str, entity_id: str, expected_version: int, actual_version: int | None):
        super().__init__(
            message=f"Conflicto de concurrencia en {entity} {entity_id}: "
            f"versión esperada {expected_version}, versión actual {actual_version}",
            code="OPTIMISTIC_LOCK_ERROR",
        )
        self.entity = entity
        self.entity_id = entity_id
        self.expected_version = expected_version
        self.actual_version = actual_version


class IdempotencyConflictError(ConflictError):
    """Conflicto de idempotencia: mismo key pero diferente request."""

    def __init__(self, idem_key: str, scope: str):
        super().__init__(
            message=f"Conflicto de idempotencia: key '{idem_key}' en scope '{scope}' "
            f"ya existe con diferente request hash",
            code="IDEMPOTENCY_CONFLICT",
        )
        self.idem_key = idem_key
        self.scope = scope


# === Errores de Almacenamiento ===


class StoreUnavailableError(DomainError):
    """Falla transitoria de I/O contra el almacenamiento."""

    kind = ErrorKind.STORE_UNAVAILABLE

    def __init__(self, message: str, retryable: bool = False):
        super().__init__(message=message, code="STORE_UNAVAILABLE")
        self.retryable = retryable
