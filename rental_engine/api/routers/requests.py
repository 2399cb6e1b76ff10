from fastapi import APIRouter, Depends, Header, HTTPException, status

from rental_engine.api.dependencies import get_facade, get_worker
from rental_engine.api.results import after_write, render_result
from rental_engine.api.schemas.rentals import (
    CreateRequestIn,
    EditRequestIn,
    OperationResponse,
    RejectIn,
    RentalRequestOut,
)
from rental_engine.application.use_cases.lifecycle_facade import RentalLifecycleFacade
from rental_engine.infrastructure.scheduling.reconciliation_worker import ReconciliationWorker

router = APIRouter()


@router.post(
    "/requests",
    response_model=OperationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_request(
    payload: CreateRequestIn,
    idem_key: str = Header(default=None, convert_underscores=False, alias="Idempotency-Key"),
    facade: RentalLifecycleFacade = Depends(get_facade),
    worker: ReconciliationWorker | None = Depends(get_worker),
):
    if not idem_key:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Idempotency-Key header is required",
        )
    result = await facade.create_request(payload.to_dto(), idem_key)
    after_write(result, worker)
    return render_result(result, RentalRequestOut.from_entity, status.HTTP_201_CREATED)


@router.patch("/requests/{request_id}", response_model=OperationResponse)
async def edit_request(
    request_id: str,
    payload: EditRequestIn,
    facade: RentalLifecycleFacade = Depends(get_facade),
    worker: ReconciliationWorker | None = Depends(get_worker),
):
    result = await facade.edit_request(payload.to_dto(request_id))
    after_write(result, worker)
    return render_result(result, RentalRequestOut.from_entity)


@router.post("/requests/{request_id}/accept", response_model=OperationResponse)
async def accept_request(
    request_id: str,
    facade: RentalLifecycleFacade = Depends(get_facade),
    worker: ReconciliationWorker | None = Depends(get_worker),
):
    result = await facade.accept(request_id)
    after_write(result, worker)
    return render_result(result, RentalRequestOut.from_entity)


@router.post("/requests/{request_id}/reject", response_model=OperationResponse)
async def reject_request(
    request_id: str,
    payload: RejectIn | None = None,
    facade: RentalLifecycleFacade = Depends(get_facade),
    worker: ReconciliationWorker | None = Depends(get_worker),
):
    result = await facade.reject(request_id, reason=payload.reason if payload else None)
    after_write(result, worker)
    return render_result(result, RentalRequestOut.from_entity)


@router.post("/requests/{request_id}/undo-reject", response_model=OperationResponse)
async def undo_reject_request(
    request_id: str,
    facade: RentalLifecycleFacade = Depends(get_facade),
    worker: ReconciliationWorker | None = Depends(get_worker),
):
    result = await facade.undo_reject(request_id)
    after_write(result, worker)
    return render_result(result, RentalRequestOut.from_entity)


@router.post("/requests/{request_id}/set-pending", response_model=OperationResponse)
async def set_pending_request(
    request_id: str,
    facade: RentalLifecycleFacade = Depends(get_facade),
    worker: ReconciliationWorker | None = Depends(get_worker),
):
    result = await facade.set_pending(request_id)
    after_write(result, worker)
    return render_result(result, RentalRequestOut.from_entity)
