from fastapi import APIRouter, Depends, Header, HTTPException, status

from rental_engine.api.dependencies import get_facade, get_worker
from rental_engine.api.results import after_write, render_result
from rental_engine.api.schemas.rentals import (
    BoardEntryOut,
    CreateOrderIn,
    OperationResponse,
    RentalOrderOut,
)
from rental_engine.application.use_cases.lifecycle_facade import RentalLifecycleFacade
from rental_engine.infrastructure.scheduling.reconciliation_worker import ReconciliationWorker

router = APIRouter()


@router.post(
    "/orders",
    response_model=OperationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_order(
    payload: CreateOrderIn,
    idem_key: str = Header(default=None, convert_underscores=False, alias="Idempotency-Key"),
    facade: RentalLifecycleFacade = Depends(get_facade),
    worker: ReconciliationWorker | None = Depends(get_worker),
):
    if not idem_key:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Idempotency-Key header is required",
        )
    result = await facade.create_order_direct(payload.to_dto(), idem_key)
    after_write(result, worker)
    return render_result(result, RentalOrderOut.from_entity, status.HTTP_201_CREATED)


@router.post("/orders/{order_id}/cancel", response_model=OperationResponse)
async def cancel_order(
    order_id: str,
    facade: RentalLifecycleFacade = Depends(get_facade),
    worker: ReconciliationWorker | None = Depends(get_worker),
):
    result = await facade.cancel_order(order_id)
    after_write(result, worker)
    return render_result(result, RentalOrderOut.from_entity)


@router.post("/orders/{order_id}/redo", response_model=OperationResponse)
async def redo_order(
    order_id: str,
    facade: RentalLifecycleFacade = Depends(get_facade),
    worker: ReconciliationWorker | None = Depends(get_worker),
):
    result = await facade.redo_order(order_id)
    after_write(result, worker)
    return render_result(result, RentalOrderOut.from_entity)


@router.get("/board", response_model=OperationResponse)
async def list_board(facade: RentalLifecycleFacade = Depends(get_facade)):
    result = await facade.list_board()
    return render_result(result, lambda entries: [BoardEntryOut.from_entry(e) for e in entries])
