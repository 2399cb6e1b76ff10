from fastapi import APIRouter, Depends

from rental_engine.api.dependencies import get_clock, get_reconcile_runner, get_worker
from rental_engine.api.schemas.rentals import OperationResponse, ReconcileReportOut
from rental_engine.application.interfaces.clock import Clock
from rental_engine.infrastructure.scheduling.reconciliation_worker import ReconcileRunner, ReconciliationWorker

router = APIRouter()


@router.post("/reconciliation/run", response_model=OperationResponse)
async def run_reconciliation(
    run_reconcile: ReconcileRunner = Depends(get_reconcile_runner),
    clock: Clock = Depends(get_clock),
) -> OperationResponse:
    """Ejecuta una pasada de reconciliación bajo demanda."""
    report = await run_reconcile(clock.now())
    return OperationResponse(success=True, data=ReconcileReportOut.from_report(report))


@router.get("/reconciliation/last", response_model=OperationResponse)
async def last_reconciliation(
    worker: ReconciliationWorker | None = Depends(get_worker),
) -> OperationResponse:
    """Último reporte del worker programado (null si aún no corre)."""
    report = worker.last_report if worker is not None else None
    return OperationResponse(
        success=True,
        data=ReconcileReportOut.from_report(report) if report is not None else None,
    )
