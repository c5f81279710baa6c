import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from redis import RedisError

from .config import settings
from .database import engine
from .models import Base
from .redis_client import redis_client
from .routers.bookings import router as bookings_router
from .routers.locations import router as locations_router
from .routers.services import router as services_router
from .routers.slots import router as slots_router
from .services.errors import (
    BookingError,
    InvalidTransitionError,
    NotEditableError,
    NotFoundError,
    ServiceNotOfferedError,
    SlotUnavailableError,
    StaleSnapshotError,
    StoreReadError,
    StoreWriteError,
)

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[BookingError], int] = {
    NotFoundError: 404,
    InvalidTransitionError: 409,
    NotEditableError: 409,
    ServiceNotOfferedError: 409,
    SlotUnavailableError: 409,
    StaleSnapshotError: 409,
    StoreReadError: 503,
    StoreWriteError: 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    url = settings.resolved_database_url
    if url.startswith("sqlite:///"):
        db_path = url.removeprefix("sqlite:///")
        if db_path and db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready")

    if redis_client is None:
        logger.info("REDIS_URL not set: ranges cache and events disabled")
    yield


app = FastAPI(title="Agenda API", lifespan=lifespan)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    status_code = ERROR_STATUS.get(type(exc), 400)
    if isinstance(exc, StaleSnapshotError):
        detail = "Could not save, retry"
    else:
        detail = str(exc)
    logger.warning(f"{request.method} {request.url.path} → {status_code}: {exc}")
    return JSONResponse(status_code=status_code, content={"detail": detail})


app.include_router(locations_router)
app.include_router(services_router)
app.include_router(slots_router)
app.include_router(bookings_router)


@app.get("/health")
def health():
    if redis_client is None:
        return {"status": "ok", "redis": None}
    try:
        return {"status": "ok", "redis": redis_client.ping()}
    except RedisError:
        logger.warning("Redis ping failed")
        return {"status": "ok", "redis": False}
