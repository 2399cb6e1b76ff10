"""
Façade del ciclo de vida de rentas.

Cada operación carga el estado desde el RentalStore, valida la transición con
la máquina de estados, recalcula el monto cuando cambian intervalo, opciones
o vehículo, y persiste todos los efectos (solicitud, orden y estado del
vehículo) en una sola unidad de trabajo.
"""

import asyncio
import hashlib
import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import asdict, replace
from datetime import datetime
from typing import Any, TypeVar

from rental_engine.application.dtos.lifecycle_dto import (
    BoardEntry,
    CreateOrderDTO,
    CreateRequestDTO,
    EditRequestDTO,
    OperationResult,
    UnavailablePeriod,
)
from rental_engine.application.interfaces.clock import Clock
from rental_engine.application.interfaces.idempotency_repo import (
    IdempotencyRecord,
    IdempotencyRepo,
)
from rental_engine.application.interfaces.rental_store import (
    OrderFilter,
    RentalStore,
    RequestFilter,
)
from rental_engine.application.interfaces.transaction_manager import TransactionManager
from rental_engine.application.interfaces.uuid_generator import UUIDGenerator
from rental_engine.domain.entities.rental_order import OrderStatus, OrderType, RentalOrder
from rental_engine.domain.entities.rental_request import RentalRequest, RequestStatus
from rental_engine.domain.entities.vehicle import Vehicle, VehicleStatus
from rental_engine.domain.errors import (
    DivergedLifecycleError,
    DomainError,
    ErrorKind,
    IdempotencyConflictError,
    IllegalTransitionError,
    OrderNotFoundError,
    OverlappingOrderError,
    RequestNotFoundError,
    ValidationError,
    VehicleNotFoundError,
)
from rental_engine.domain.lifecycle import (
    OrderAction,
    RequestAction,
    TransitionOutcome,
    derive_vehicle_status,
    ensure_bookable,
    find_overlap,
    order_target,
    plan_order_transition,
    plan_request_transition,
    request_target,
)
from rental_engine.domain.pricing import PriceBreakdown, PricingCalculator
from rental_engine.domain.value_objects.option_set import OptionSet
from rental_engine.domain.value_objects.rental_interval import RentalInterval

logger = logging.getLogger(__name__)

T = TypeVar("T")
RetryPolicy = Callable[[Callable[[], Awaitable[Any]]], Awaitable[Any]]

REQUEST_CREATE_SCOPE = "REQUEST_CREATE"
ORDER_CREATE_SCOPE = "ORDER_CREATE"

UNKNOWN_OUTCOME_DETAIL = (
    "Tiempo de espera agotado: el resultado es desconocido, "
    "vuelva a leer el estado antes de reintentar"
)


def _hash_request(payload: dict[str, Any]) -> str:
    normalized = json.dumps(payload, sort_keys=True, default=str, separators=(",", ":"))
    return hashlib.sha256(normalized.encode()).hexdigest()


async def _run_once(func: Callable[[], Awaitable[T]]) -> T:
    return await func()


class RentalLifecycleFacade:
    """Operaciones externas del ciclo de vida de solicitudes y órdenes."""

    def __init__(
        self,
        store: RentalStore,
        idempotency_repo: IdempotencyRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
        uuid_generator: UUIDGenerator,
        pricing: PricingCalculator | None = None,
        retry: RetryPolicy | None = None,
        store_timeout_seconds: float = 5.0,
        turnaround_hours: float = 12,
    ) -> None:
        self._store = store
        self._idempotency_repo = idempotency_repo
        self._tx = transaction_manager
        self._clock = clock
        self._uuid = uuid_generator
        self._pricing = pricing or PricingCalculator()
        self._retry = retry or _run_once
        self._timeout = store_timeout_seconds
        self._turnaround_hours = turnaround_hours

    # === Ejecución ===

    async def _run(
        self,
        operation: str,
        func: Callable[[], Awaitable[Any]],
        **log_extra: Any,
    ) -> OperationResult:
        """
        Ejecuta una operación con reintento de fallas transitorias y timeout.

        Los errores de dominio se convierten en OperationResult.fail; un
        timeout se reporta como STORE_UNAVAILABLE con resultado desconocido.
        """
        extra = {"operation": operation, **log_extra}
        try:
            data = await asyncio.wait_for(self._retry(func), timeout=self._timeout)
        except DomainError as exc:
            logger.warning(
                "Operación rechazada",
                extra={**extra, "error_code": exc.code, "error_kind": exc.kind.value},
            )
            return OperationResult.fail(exc)
        except asyncio.TimeoutError:
            logger.error("Operación sin confirmar por timeout", extra=extra)
            return OperationResult(
                success=False,
                error_kind=ErrorKind.STORE_UNAVAILABLE,
                error_detail=UNKNOWN_OUTCOME_DETAIL,
                error_code="STORE_TIMEOUT",
            )
        logger.info("Operación completada", extra=extra)
        return OperationResult.ok(data)

    # === Carga ===

    async def _load_vehicle(self, vehicle_id: str) -> Vehicle:
        vehicle = await self._store.get_vehicle(vehicle_id)
        if vehicle is None:
            raise VehicleNotFoundError(vehicle_id)
        return vehicle

    async def _load_request(self, request_id: str) -> RentalRequest:
        request = await self._store.get_request(request_id)
        if request is None:
            raise RequestNotFoundError(request_id)
        return request

    async def _load_order(self, order_id: str) -> RentalOrder:
        order = await self._store.get_order(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    async def _active_orders(self, vehicle_id: str) -> list[RentalOrder]:
        return await self._store.list_orders(
            OrderFilter.build(vehicle_id=vehicle_id, statuses=[OrderStatus.ACTIVE])
        )

    async def _ensure_no_overlap(
        self,
        vehicle_id: str,
        interval: RentalInterval,
        exclude_order_id: str | None = None,
    ) -> None:
        conflict = find_overlap(interval, await self._active_orders(vehicle_id), exclude_order_id)
        if conflict is not None:
            raise OverlappingOrderError(vehicle_id, conflict.id)

    async def _refresh_vehicle(self, vehicle: Vehicle, now: datetime) -> Vehicle:
        """
        Recalcula y guarda el estado derivado del vehículo.

        Siempre escribe con la versión leída al inicio de la operación, de
        modo que dos operaciones concurrentes sobre el mismo vehículo no
        pueden confirmar ambas.
        """
        status = derive_vehicle_status(vehicle, await self._active_orders(vehicle.id), now)
        return await self._store.save_vehicle_status(vehicle.id, status, expected_version=vehicle.version)

    async def _check_idempotency(
        self, scope: str, idem_key: str, request_hash: str
    ) -> IdempotencyRecord | None:
        existing = await self._idempotency_repo.get(scope=scope, idem_key=idem_key)
        if existing and existing.request_hash != request_hash:
            raise IdempotencyConflictError(idem_key, scope)
        return existing

    @staticmethod
    def _require_key(idem_key: str | None) -> str:
        if not idem_key or not idem_key.strip():
            raise ValidationError("idempotency_key", "es requerido para operaciones de creación")
        return idem_key.strip()

    async def _cancel_linked_order(self, request: RentalRequest, now: datetime) -> Vehicle | None:
        """Cancela la orden ACTIVE vinculada a la solicitud; retorna su vehículo."""
        if not request.order_id:
            return None
        order = await self._store.get_order(request.order_id)
        if order is None or not order.is_active:
            return None
        vehicle = await self._load_vehicle(order.vehicle_id)
        order.status = OrderStatus.CANCELLED
        order.updated_at = now
        await self._store.save_order(order, expected_version=order.version)
        logger.info(
            "Orden cancelada en cascada",
            extra={"order_id": order.id, "request_id": request.id},
        )
        return vehicle

    # === Solicitudes ===

    async def create_request(self, data: CreateRequestDTO, idempotency_key: str | None) -> OperationResult:
        """Registra una solicitud PENDING con su monto calculado."""

        async def execute() -> RentalRequest:
            idem_key = self._require_key(idempotency_key)
            request_hash = _hash_request(asdict(data))
            customer = data.customer.to_customer()
            interval = RentalInterval.create(data.pickup_at, data.return_at)
            options = OptionSet.from_input(data.options)

            async with self._tx.start():
                existing = await self._check_idempotency(REQUEST_CREATE_SCOPE, idem_key, request_hash)
                if existing:
                    return await self._load_request(existing.reference_id)

                vehicle = await self._load_vehicle(data.vehicle_id)
                ensure_bookable(vehicle)
                now = self._clock.now()
                request = RentalRequest(
                    id=self._uuid.generate_uuid(),
                    vehicle_id=vehicle.id,
                    customer=customer,
                    interval=interval,
                    amount=self._pricing.compute_price(vehicle, interval, options),
                    options=options,
                    comment=data.comment,
                    status=RequestStatus.PENDING,
                    created_at=now,
                    updated_at=now,
                )
                saved = await self._store.save_request(request, expected_version=None)
                await self._idempotency_repo.save(
                    IdempotencyRecord(
                        scope=REQUEST_CREATE_SCOPE,
                        idem_key=idem_key,
                        request_hash=request_hash,
                        reference_id=saved.id,
                        created_at=now,
                    )
                )
                return saved

        return await self._run("create_request", execute, vehicle_id=data.vehicle_id)

    async def accept(self, request_id: str) -> OperationResult:
        """Aprueba una solicitud PENDING y materializa su orden ACTIVE."""

        async def execute() -> RentalRequest:
            async with self._tx.start():
                request = await self._load_request(request_id)
                if plan_request_transition(request, RequestAction.APPROVE) is TransitionOutcome.NOOP:
                    return request

                vehicle = await self._load_vehicle(request.vehicle_id)
                ensure_bookable(vehicle)
                await self._ensure_no_overlap(vehicle.id, request.interval)

                now = self._clock.now()
                order = await self._store.save_order(
                    RentalOrder(
                        id=self._uuid.generate_uuid(),
                        vehicle_id=vehicle.id,
                        customer=request.customer,
                        interval=request.interval,
                        amount=request.amount,
                        daily_rate=vehicle.effective_rate,
                        request_id=request.id,
                        options=request.options,
                        status=OrderStatus.ACTIVE,
                        order_type=OrderType.RENTAL,
                        created_at=now,
                        updated_at=now,
                    ),
                    expected_version=None,
                )
                request.status = request_target(RequestAction.APPROVE)
                request.order_id = order.id
                request.rejection_reason = None
                request.updated_at = now
                saved = await self._store.save_request(request, expected_version=request.version)
                await self._refresh_vehicle(vehicle, now)
                return saved

        return await self._run("accept", execute, request_id=request_id)

    async def reject(self, request_id: str, reason: str | None = None) -> OperationResult:
        """Rechaza la solicitud; si estaba aprobada cancela su orden en la misma unidad de trabajo."""

        async def execute() -> RentalRequest:
            async with self._tx.start():
                request = await self._load_request(request_id)
                if plan_request_transition(request, RequestAction.REJECT) is TransitionOutcome.NOOP:
                    return request

                now = self._clock.now()
                vehicle = None
                if request.status == RequestStatus.APPROVED:
                    vehicle = await self._cancel_linked_order(request, now)
                request.status = request_target(RequestAction.REJECT)
                request.rejection_reason = reason
                request.updated_at = now
                saved = await self._store.save_request(request, expected_version=request.version)
                if vehicle is not None:
                    await self._refresh_vehicle(vehicle, now)
                return saved

        return await self._run("reject", execute, request_id=request_id)

    async def undo_reject(self, request_id: str) -> OperationResult:
        """
        Regresa una solicitud REJECTED a PENDING.

        La orden cancelada no se reactiva; una nueva aprobación crea una
        orden nueva.
        """

        async def execute() -> RentalRequest:
            async with self._tx.start():
                request = await self._load_request(request_id)
                if plan_request_transition(request, RequestAction.UNDO_REJECT) is TransitionOutcome.NOOP:
                    return request
                request.status = request_target(RequestAction.UNDO_REJECT)
                request.rejection_reason = None
                request.updated_at = self._clock.now()
                return await self._store.save_request(request, expected_version=request.version)

        return await self._run("undo_reject", execute, request_id=request_id)

    async def set_pending(self, request_id: str) -> OperationResult:
        """Regresa una solicitud APPROVED a PENDING y cancela su orden."""

        async def execute() -> RentalRequest:
            async with self._tx.start():
                request = await self._load_request(request_id)
                if plan_request_transition(request, RequestAction.SET_PENDING) is TransitionOutcome.NOOP:
                    return request

                now = self._clock.now()
                vehicle = await self._cancel_linked_order(request, now)
                request.status = request_target(RequestAction.SET_PENDING)
                request.updated_at = now
                saved = await self._store.save_request(request, expected_version=request.version)
                if vehicle is not None:
                    await self._refresh_vehicle(vehicle, now)
                return saved

        return await self._run("set_pending", execute, request_id=request_id)

    async def edit_request(self, data: EditRequestDTO) -> OperationResult:
        """
        Edita una solicitud y recalcula su monto.

        Si la solicitud está aprobada con una orden ACTIVE, la orden se
        actualiza también y se revalida el traslape contra las demás órdenes
        del vehículo destino.
        """

        async def execute() -> RentalRequest:
            customer = data.customer.to_customer() if data.customer is not None else None
            options = OptionSet.from_input(data.options) if data.options is not None else None

            async with self._tx.start():
                request = await self._load_request(data.request_id)
                if request.is_terminal:
                    raise IllegalTransitionError("solicitud", request.status.value, "editar")

                if data.pickup_at is not None or data.return_at is not None:
                    interval = RentalInterval.create(
                        data.pickup_at or request.interval.pickup_at,
                        data.return_at or request.interval.return_at,
                    )
                else:
                    interval = request.interval
                vehicle = await self._load_vehicle(data.vehicle_id or request.vehicle_id)
                ensure_bookable(vehicle)

                now = self._clock.now()
                request.vehicle_id = vehicle.id
                request.interval = interval
                request.customer = customer or request.customer
                request.options = options if options is not None else request.options
                if data.comment is not None:
                    request.comment = data.comment
                request.amount = self._pricing.compute_price(vehicle, interval, request.options)
                request.updated_at = now

                order = None
                if request.status == RequestStatus.APPROVED and request.order_id:
                    order = await self._store.get_order(request.order_id)
                    if order is not None and not order.is_active:
                        order = None

                if order is None:
                    return await self._store.save_request(request, expected_version=request.version)

                previous_vehicle = (
                    vehicle if order.vehicle_id == vehicle.id else await self._load_vehicle(order.vehicle_id)
                )
                await self._ensure_no_overlap(vehicle.id, interval, exclude_order_id=order.id)
                order.vehicle_id = vehicle.id
                order.interval = interval
                order.customer = request.customer
                order.options = request.options
                order.amount = request.amount
                order.daily_rate = vehicle.effective_rate
                order.updated_at = now
                await self._store.save_order(order, expected_version=order.version)
                saved = await self._store.save_request(request, expected_version=request.version)

                await self._refresh_vehicle(vehicle, now)
                if previous_vehicle.id != vehicle.id:
                    await self._refresh_vehicle(previous_vehicle, now)
                return saved

        return await self._run("edit_request", execute, request_id=data.request_id)

    # === Órdenes ===

    async def create_order_direct(self, data: CreateOrderDTO, idempotency_key: str | None) -> OperationResult:
        """Reserva manual del administrador, sin pasar por una solicitud."""

        async def execute() -> RentalOrder:
            idem_key = self._require_key(idempotency_key)
            request_hash = _hash_request(asdict(data))
            customer = data.customer.to_customer()
            interval = RentalInterval.create(data.pickup_at, data.return_at)
            options = OptionSet.from_input(data.options)

            async with self._tx.start():
                existing = await self._check_idempotency(ORDER_CREATE_SCOPE, idem_key, request_hash)
                if existing:
                    return await self._load_order(existing.reference_id)

                vehicle = await self._load_vehicle(data.vehicle_id)
                ensure_bookable(vehicle)
                await self._ensure_no_overlap(vehicle.id, interval)

                now = self._clock.now()
                order = await self._store.save_order(
                    RentalOrder(
                        id=self._uuid.generate_uuid(),
                        vehicle_id=vehicle.id,
                        customer=customer,
                        interval=interval,
                        amount=self._pricing.compute_price(vehicle, interval, options),
                        daily_rate=vehicle.effective_rate,
                        options=options,
                        status=OrderStatus.ACTIVE,
                        order_type=OrderType.RENTAL,
                        created_at=now,
                        updated_at=now,
                    ),
                    expected_version=None,
                )
                await self._idempotency_repo.save(
                    IdempotencyRecord(
                        scope=ORDER_CREATE_SCOPE,
                        idem_key=idem_key,
                        request_hash=request_hash,
                        reference_id=order.id,
                        created_at=now,
                    )
                )
                await self._refresh_vehicle(vehicle, now)
                return order

        return await self._run("create_order_direct", execute, vehicle_id=data.vehicle_id)

    async def cancel_order(self, order_id: str) -> OperationResult:
        """Cancela una orden ACTIVE; la solicitud de origen no cambia."""

        async def execute() -> RentalOrder:
            async with self._tx.start():
                order = await self._load_order(order_id)
                if plan_order_transition(order, OrderAction.CANCEL) is TransitionOutcome.NOOP:
                    return order

                vehicle = await self._load_vehicle(order.vehicle_id)
                now = self._clock.now()
                order.status = order_target(OrderAction.CANCEL)
                order.updated_at = now
                saved = await self._store.save_order(order, expected_version=order.version)
                await self._refresh_vehicle(vehicle, now)
                return saved

        return await self._run("cancel_order", execute, order_id=order_id)

    async def redo_order(self, order_id: str) -> OperationResult:
        """
        Reactiva una orden CANCELLED.

        Sólo procede si la solicitud de origen (si existe) sigue aprobada o
        ejecutada y apunta a esta orden, y si el intervalo no se traslapa con
        órdenes creadas mientras estuvo cancelada.
        """

        async def execute() -> RentalOrder:
            async with self._tx.start():
                order = await self._load_order(order_id)
                if plan_order_transition(order, OrderAction.REDO) is TransitionOutcome.NOOP:
                    return order

                if order.request_id:
                    request = await self._store.get_request(order.request_id)
                    if request is not None and (
                        request.status not in (RequestStatus.APPROVED, RequestStatus.EXECUTED)
                        or request.order_id != order.id
                    ):
                        raise DivergedLifecycleError(order.id, request.id, request.status.value)

                vehicle = await self._load_vehicle(order.vehicle_id)
                ensure_bookable(vehicle)
                await self._ensure_no_overlap(vehicle.id, order.interval, exclude_order_id=order.id)

                now = self._clock.now()
                order.status = order_target(OrderAction.REDO)
                order.updated_at = now
                saved = await self._store.save_order(order, expected_version=order.version)
                await self._refresh_vehicle(vehicle, now)
                return saved

        return await self._run("redo_order", execute, order_id=order_id)

    # === Vehículos y consultas ===

    async def quote(
        self,
        vehicle_id: str,
        pickup_at: datetime,
        return_at: datetime,
        options: dict[str, bool] | None = None,
    ) -> OperationResult:
        """Desglose de precio sin escribir nada."""

        async def execute() -> PriceBreakdown:
            interval = RentalInterval.create(pickup_at, return_at)
            option_set = OptionSet.from_input(options)
            async with self._tx.start():
                vehicle = await self._load_vehicle(vehicle_id)
            return self._pricing.quote(vehicle, interval, option_set)

        return await self._run("quote", execute, vehicle_id=vehicle_id)

    async def set_vehicle_status(self, vehicle_id: str, status: VehicleStatus) -> OperationResult:
        """
        Fija o retira un estado manual del vehículo.

        MAINTENANCE y DELETED se guardan tal cual; cualquier otro valor
        retira el estado manual y recalcula el estado derivado.
        """

        async def execute() -> Vehicle:
            async with self._tx.start():
                vehicle = await self._load_vehicle(vehicle_id)
                now = self._clock.now()
                if status.is_override:
                    new_status = status
                else:
                    new_status = derive_vehicle_status(
                        replace(vehicle, status=VehicleStatus.AVAILABLE),
                        await self._active_orders(vehicle.id),
                        now,
                    )
                return await self._store.save_vehicle_status(
                    vehicle.id, new_status, expected_version=vehicle.version
                )

        return await self._run("set_vehicle_status", execute, vehicle_id=vehicle_id)

    async def list_vehicles(self) -> OperationResult:
        async def execute() -> list[Vehicle]:
            async with self._tx.start():
                return await self._store.list_vehicles()

        return await self._run("list_vehicles", execute)

    async def list_board(self) -> OperationResult:
        """
        Tablero combinado de órdenes y solicitudes, del más reciente al más antiguo.

        Excluye solicitudes EXECUTED y todo lo que pertenece a vehículos eliminados.
        """

        async def execute() -> list[BoardEntry]:
            async with self._tx.start():
                vehicles = {v.id: v for v in await self._store.list_vehicles()}
                requests = await self._store.list_requests()
                orders = await self._store.list_orders()

            entries = [
                BoardEntry(
                    entry_type=OrderType.RENTAL,
                    id=order.id,
                    vehicle_id=order.vehicle_id,
                    vehicle_name=vehicles[order.vehicle_id].name,
                    customer_name=order.customer.full_name,
                    pickup_at=order.interval.pickup_at,
                    return_at=order.interval.return_at,
                    amount=order.amount,
                    status=order.status.value,
                    created_at=order.created_at,
                )
                for order in orders
                if order.vehicle_id in vehicles
            ]
            entries.extend(
                BoardEntry(
                    entry_type=OrderType.REQUEST,
                    id=request.id,
                    vehicle_id=request.vehicle_id,
                    vehicle_name=vehicles[request.vehicle_id].name,
                    customer_name=request.customer.full_name,
                    pickup_at=request.interval.pickup_at,
                    return_at=request.interval.return_at,
                    amount=request.amount,
                    status=request.status.value,
                    created_at=request.created_at,
                )
                for request in requests
                if request.vehicle_id in vehicles and request.status != RequestStatus.EXECUTED
            )
            entries.sort(
                key=lambda e: e.created_at.timestamp() if e.created_at else float("-inf"),
                reverse=True,
            )
            return entries

        return await self._run("list_board", execute)

    async def list_unavailable_periods(self, vehicle_id: str) -> OperationResult:
        """Intervalos de órdenes ACTIVE vigentes, ampliados con el margen de preparación."""

        async def execute() -> list[UnavailablePeriod]:
            async with self._tx.start():
                vehicle = await self._load_vehicle(vehicle_id)
                orders = await self._active_orders(vehicle.id)
            now = self._clock.now()
            periods = []
            for order in orders:
                blocked = order.interval.extended(self._turnaround_hours)
                if blocked.return_at >= now:
                    periods.append(
                        UnavailablePeriod(order_id=order.id, start=blocked.pickup_at, end=blocked.return_at)
                    )
            periods.sort(key=lambda p: p.start)
            return periods

        return await self._run("list_unavailable_periods", execute, vehicle_id=vehicle_id)
