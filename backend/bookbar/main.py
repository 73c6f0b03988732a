import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import settings
from .errors import BookingError
from .redis_client import redis_client
from .routers import (
    add_ons,
    admin,
    bookings,
    cron,
    payments,
    services,
    settings as settings_router,
    slots,
    time_off,
)
from .services.notifications.consumer import notification_consumer_loop

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    consumer_task = None
    if settings.notifications_consumer_enabled:
        consumer_task = asyncio.create_task(notification_consumer_loop())

    yield

    if consumer_task is not None:
        consumer_task.cancel()
        try:
            await consumer_task
        except asyncio.CancelledError:
            pass


app = FastAPI(title="Bookbar API", lifespan=lifespan)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    if exc.status_code >= 500:
        logger.warning(f"{request.method} {request.url.path}: {exc.code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


@app.get("/health")
def health():
    try:
        redis_ok = bool(redis_client.ping())
    except Exception as e:
        logger.error(f"Redis ping failed: {e}")
        redis_ok = False
    return {"ok": True, "redis": redis_ok}


app.include_router(services.router)
app.include_router(services.admin_router)
app.include_router(add_ons.router)
app.include_router(slots.router)
app.include_router(bookings.router)
app.include_router(bookings.admin_router)
app.include_router(time_off.router)
app.include_router(settings_router.router)
app.include_router(settings_router.admin_router)
app.include_router(payments.router)
app.include_router(payments.webhook_router)
app.include_router(payments.admin_router)
app.include_router(cron.router)
app.include_router(admin.router)
