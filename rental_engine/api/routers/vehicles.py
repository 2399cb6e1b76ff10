from fastapi import APIRouter, Depends

from rental_engine.api.dependencies import get_facade, get_worker
from rental_engine.api.results import after_write, render_result
from rental_engine.api.schemas.rentals import (
    OperationResponse,
    PriceBreakdownOut,
    QuoteIn,
    UnavailablePeriodOut,
    VehicleOut,
    VehicleStatusIn,
)
from rental_engine.application.use_cases.lifecycle_facade import RentalLifecycleFacade
from rental_engine.infrastructure.scheduling.reconciliation_worker import ReconciliationWorker

router = APIRouter()


@router.get("/vehicles", response_model=OperationResponse)
async def list_vehicles(facade: RentalLifecycleFacade = Depends(get_facade)):
    result = await facade.list_vehicles()
    return render_result(result, lambda vehicles: [VehicleOut.from_entity(v) for v in vehicles])


@router.put("/vehicles/{vehicle_id}/status", response_model=OperationResponse)
async def set_vehicle_status(
    vehicle_id: str,
    payload: VehicleStatusIn,
    facade: RentalLifecycleFacade = Depends(get_facade),
    worker: ReconciliationWorker | None = Depends(get_worker),
):
    result = await facade.set_vehicle_status(vehicle_id, payload.status)
    after_write(result, worker)
    return render_result(result, VehicleOut.from_entity)


@router.get("/vehicles/{vehicle_id}/unavailable-periods", response_model=OperationResponse)
async def list_unavailable_periods(
    vehicle_id: str,
    facade: RentalLifecycleFacade = Depends(get_facade),
):
    result = await facade.list_unavailable_periods(vehicle_id)
    return render_result(result, lambda periods: [UnavailablePeriodOut.from_period(p) for p in periods])


@router.post("/quotes", response_model=OperationResponse)
async def quote(payload: QuoteIn, facade: RentalLifecycleFacade = Depends(get_facade)):
    result = await facade.quote(payload.vehicle_id, payload.pickup_at, payload.return_at, payload.options)
    return render_result(result, PriceBreakdownOut.from_breakdown)
