import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from rental_engine.api.dependencies import build_worker, get_in_memory_bundle
from rental_engine.api.deps import engine
from rental_engine.api.routers.health import router as health_router
from rental_engine.api.routers.orders import router as orders_router
from rental_engine.api.routers.reconciliation import router as reconciliation_router
from rental_engine.api.routers.requests import router as requests_router
from rental_engine.api.routers.vehicles import router as vehicles_router
from rental_engine.config import get_settings
from rental_engine.infrastructure.db.engine import create_tables
from rental_engine.infrastructure.seed import seed_vehicles

settings = get_settings()

# Configure structured logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not settings.use_in_memory:
        # Initialize DB tables (for dev/demo purposes)
        await create_tables(engine)
    elif settings.seed_demo_data:
        bundle = get_in_memory_bundle()
        await seed_vehicles(bundle["store"], bundle["tx_manager"])

    worker = None
    if settings.scheduler_enabled:
        worker = build_worker(settings)
        app.state.reconciliation_worker = worker
        worker.start()
    yield
    # Cleanup
    if worker is not None:
        await worker.stop()
        app.state.reconciliation_worker = None
    await engine.dispose()


app = FastAPI(
    title="Rental Lifecycle API",
    version="1.0.0",
    lifespan=lifespan,
)


# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler to prevent stack trace exposure to clients.
    All unhandled exceptions are logged internally and return a generic error message.
    """
    error_id = str(uuid.uuid4())

    logger.error(
        "Unhandled exception occurred",
        exc_info=exc,
        extra={
            "error_id": error_id,
            "path": request.url.path,
            "method": request.method,
            "client_host": request.client.host if request.client else None,
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error_id": error_id,
            "message": "An unexpected error occurred. Please contact support with the error_id if the issue persists.",
        },
    )


app.include_router(health_router, tags=["Health"])
app.include_router(requests_router, prefix="/api/v1", tags=["Requests"])
app.include_router(orders_router, prefix="/api/v1", tags=["Orders"])
app.include_router(vehicles_router, prefix="/api/v1", tags=["Vehicles"])
app.include_router(reconciliation_router, prefix="/api/v1", tags=["Reconciliation"])
