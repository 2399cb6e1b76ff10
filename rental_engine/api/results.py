from collections.abc import Callable
from typing import Any

from fastapi import status
from fastapi.responses import JSONResponse

from rental_engine.api.schemas.rentals import OperationResponse
from rental_engine.application.dtos.lifecycle_dto import OperationResult
from rental_engine.domain.errors import ErrorKind
from rental_engine.infrastructure.scheduling.reconciliation_worker import ReconciliationWorker

ERROR_STATUS = {
    ErrorKind.VALIDATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.STORE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def render_result(
    result: OperationResult,
    serialize: Callable[[Any], Any],
    success_status: int = status.HTTP_200_OK,
) -> JSONResponse:
    """Convierte un OperationResult del façade en la respuesta HTTP."""
    if result.success:
        body = OperationResponse(success=True, data=serialize(result.data))
        return JSONResponse(status_code=success_status, content=body.model_dump(mode="json"))

    body = OperationResponse(
        success=False,
        error_kind=result.error_kind.value if result.error_kind else None,
        error_detail=result.error_detail,
        error_code=result.error_code,
    )
    return JSONResponse(
        status_code=ERROR_STATUS.get(result.error_kind, status.HTTP_500_INTERNAL_SERVER_ERROR),
        content=body.model_dump(mode="json"),
    )


def after_write(result: OperationResult, worker: ReconciliationWorker | None) -> None:
    """Despierta al worker de reconciliación tras una escritura exitosa."""
    if result.success and worker is not None:
        worker.request_run()
