"""
Caso de uso de reconciliación temporal.

Avanza solicitudes APPROVED a EXECUTED cuando llega la hora de recogida y
órdenes ACTIVE a COMPLETED cuando pasa la hora de devolución, recalculando
el estado de cada vehículo. Es idempotente: una segunda ejecución sobre el
mismo estado no produce cambios.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from rental_engine.application.interfaces.rental_store import (
    OrderFilter,
    RentalStore,
    RequestFilter,
)
from rental_engine.application.interfaces.transaction_manager import TransactionManager
from rental_engine.domain.entities.rental_order import OrderStatus
from rental_engine.domain.entities.rental_request import RequestStatus
from rental_engine.domain.errors import DomainError
from rental_engine.domain.lifecycle import (
    OrderAction,
    RequestAction,
    TransitionOutcome,
    derive_vehicle_status,
    order_target,
    plan_order_transition,
    plan_request_transition,
    request_target,
)
from rental_engine.domain.value_objects.rental_interval import as_utc

logger = logging.getLogger(__name__)


@dataclass
class ReconcileError:
    vehicle_id: str
    entity_id: str | None
    message: str


@dataclass
class ReconcileReport:
    now: datetime
    executed_count: int = 0
    completed_count: int = 0
    vehicles_scanned: int = 0
    errors: list[ReconcileError] = field(default_factory=list)


class ReconcileRentalsUseCase:
    """
    Reconciliación por vehículo.

    Cada vehículo se procesa en su propia unidad de trabajo. Un error de
    dominio sobre una solicitud u orden se registra y el escaneo continúa;
    cualquier otra falla revierte sólo el vehículo afectado.
    """

    def __init__(self, store: RentalStore, transaction_manager: TransactionManager) -> None:
        self._store = store
        self._tx = transaction_manager

    async def execute(self, now: datetime) -> ReconcileReport:
        """
        Ejecuta una pasada completa.

        Args:
            now: Instante de referencia provisto por el llamador.

        Returns:
            ReconcileReport con los conteos y errores recolectados.
        """
        now = as_utc(now)
        report = ReconcileReport(now=now)

        async with self._tx.start():
            vehicles = await self._store.list_vehicles(include_deleted=True)

        for vehicle in vehicles:
            report.vehicles_scanned += 1
            try:
                executed, completed = await self._reconcile_vehicle(vehicle.id, now, report)
            except Exception as exc:
                logger.error(
                    "Error reconciliando vehículo",
                    extra={"vehicle_id": vehicle.id, "error": str(exc)},
                    exc_info=True,
                )
                report.errors.append(ReconcileError(vehicle.id, None, str(exc)))
                continue
            report.executed_count += executed
            report.completed_count += completed

        logger.info(
            "Reconciliación completada",
            extra={
                "executed_count": report.executed_count,
                "completed_count": report.completed_count,
                "vehicles_scanned": report.vehicles_scanned,
                "error_count": len(report.errors),
            },
        )
        return report

    async def _reconcile_vehicle(
        self,
        vehicle_id: str,
        now: datetime,
        report: ReconcileReport,
    ) -> tuple[int, int]:
        executed = 0
        completed = 0

        async with self._tx.start():
            vehicle = await self._store.get_vehicle(vehicle_id)
            if vehicle is None:
                return 0, 0

            approved = await self._store.list_requests(
                RequestFilter.build(vehicle_id=vehicle_id, statuses=[RequestStatus.APPROVED])
            )
            for request in approved:
                if request.interval.pickup_at > now:
                    continue
                try:
                    if plan_request_transition(request, RequestAction.EXECUTE) is TransitionOutcome.NOOP:
                        continue
                    request.status = request_target(RequestAction.EXECUTE)
                    request.updated_at = now
                    await self._store.save_request(request, expected_version=request.version)
                    executed += 1
                except DomainError as exc:
                    logger.warning(
                        "Solicitud no reconciliada",
                        extra={"vehicle_id": vehicle_id, "request_id": request.id, "error_code": exc.code},
                    )
                    report.errors.append(ReconcileError(vehicle_id, request.id, exc.message))

            active = await self._store.list_orders(
                OrderFilter.build(vehicle_id=vehicle_id, statuses=[OrderStatus.ACTIVE])
            )
            for order in active:
                if order.interval.return_at > now:
                    continue
                try:
                    if plan_order_transition(order, OrderAction.COMPLETE) is TransitionOutcome.NOOP:
                        continue
                    order.status = order_target(OrderAction.COMPLETE)
                    order.updated_at = now
                    await self._store.save_order(order, expected_version=order.version)
                    completed += 1
                except DomainError as exc:
                    logger.warning(
                        "Orden no reconciliada",
                        extra={"vehicle_id": vehicle_id, "order_id": order.id, "error_code": exc.code},
                    )
                    report.errors.append(ReconcileError(vehicle_id, order.id, exc.message))

            still_active = await self._store.list_orders(
                OrderFilter.build(vehicle_id=vehicle_id, statuses=[OrderStatus.ACTIVE])
            )
            status = derive_vehicle_status(vehicle, still_active, now)
            if status != vehicle.status:
                await self._store.save_vehicle_status(vehicle_id, status, expected_version=vehicle.version)
                logger.info(
                    "Estado de vehículo actualizado",
                    extra={"vehicle_id": vehicle_id, "status": status.value},
                )

        return executed, completed
