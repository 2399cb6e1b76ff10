"""Worker que ejecuta la reconciliación temporal de rentas."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from uuid import uuid4

from rental_engine.application.interfaces.clock import Clock
from rental_engine.application.use_cases.reconcile_rentals import ReconcileReport

logger = logging.getLogger(__name__)

ReconcileRunner = Callable[[datetime], Awaitable[ReconcileReport]]


class ReconciliationWorker:
    """
    Worker que reconcilia solicitudes, órdenes y vehículos en segundo plano.

    Características:
    - Cadencia fija configurable
    - Ejecución inmediata bajo demanda (request_run)
    - Un fallo en una pasada no detiene el ciclo
    - Graceful shutdown
    """

    def __init__(
        self,
        run_reconcile: ReconcileRunner,
        clock: Clock,
        worker_id: str | None = None,
        interval_seconds: float = 60.0,
    ) -> None:
        """
        Inicializa el worker.

        Args:
            run_reconcile: Función async que ejecuta una pasada con el `now` dado.
            clock: Servicio de reloj.
            worker_id: Identificador único del worker (auto-generado si no se provee).
            interval_seconds: Intervalo entre pasadas en segundos.
        """
        self._run_reconcile = run_reconcile
        self._clock = clock
        self._worker_id = worker_id or f"reconciler-{uuid4().hex[:8]}"
        self._interval = interval_seconds
        self._running = False
        self._wakeup = asyncio.Event()
        self._task: asyncio.Task | None = None
        self._run_lock = asyncio.Lock()
        self._last_report: ReconcileReport | None = None

    @property
    def worker_id(self) -> str:
        return self._worker_id

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def last_report(self) -> ReconcileReport | None:
        return self._last_report

    def request_run(self) -> None:
        """Despierta el ciclo para ejecutar una pasada sin esperar la cadencia."""
        self._wakeup.set()

    async def run_once(self) -> ReconcileReport:
        """Ejecuta una pasada completa con el tiempo actual del reloj."""
        async with self._run_lock:
            report = await self._run_reconcile(self._clock.now())
            self._last_report = report
            return report

    async def run_forever(self) -> None:
        """Ciclo principal: una pasada por cadencia o por solicitud."""
        self._running = True
        logger.info(
            "ReconciliationWorker iniciado",
            extra={"worker_id": self._worker_id, "interval_seconds": self._interval},
        )

        while self._running:
            try:
                await self.run_once()
            except Exception as e:
                logger.exception(f"Error en ciclo de reconciliación: {e}")

            try:
                await asyncio.wait_for(self._wakeup.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                pass
            self._wakeup.clear()

    def start(self) -> asyncio.Task:
        """Lanza el ciclo como tarea de fondo del event loop actual."""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run_forever(), name=self._worker_id)
        return self._task

    async def stop(self) -> None:
        """Detiene el worker de forma graceful."""
        self._running = False
        self._wakeup.set()
        if self._task is not None:
            try:
                await asyncio.wait_for(self._task, timeout=self._interval)
            except asyncio.TimeoutError:
                self._task.cancel()
            self._task = None
        logger.info("ReconciliationWorker detenido", extra={"worker_id": self._worker_id})
