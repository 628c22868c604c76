import time
from contextlib import asynccontextmanager

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tourbook import __version__
from tourbook.config import get_settings
from tourbook.database import close_db, init_db, ping_db
from tourbook.deps import get_otp_service
from tourbook.handlers import register_exception_handlers
from tourbook.rate_limit import limiter
from tourbook.routers import auth, inquiries, mail, packages
from tourbook.utils.logger import get_logger

logger = get_logger("main")
settings = get_settings()

OTP_SWEEP_JOB_ID = "otp_sweep"


async def purge_expired_otps() -> None:
    removed = await get_otp_service().purge_expired()
    if removed:
        logger.info(f"OTP sweep removed {removed} expired record(s)")


def build_scheduler(interval_seconds: int) -> AsyncIOScheduler | None:
    """Periodic OTP sweep; None when the interval is 0."""
    if interval_seconds <= 0:
        return None
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        purge_expired_otps,
        trigger="interval",
        seconds=interval_seconds,
        id=OTP_SWEEP_JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    return scheduler


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME} {__version__} (env={settings.APP_ENV})")
    await init_db()

    scheduler = build_scheduler(settings.OTP_SWEEP_INTERVAL_SECONDS)
    if scheduler:
        scheduler.start()
        logger.info(f"OTP sweep every {settings.OTP_SWEEP_INTERVAL_SECONDS}s")
    try:
        yield
    finally:
        if scheduler:
            scheduler.shutdown(wait=False)
        close_db()
        logger.info(f"{settings.APP_NAME} stopped")


app = FastAPI(
    title="Tourbook API",
    version=__version__,
    debug=settings.APP_DEBUG,
    lifespan=lifespan,
)

app.state.limiter = limiter
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for module in (auth, packages, mail, inquiries):
    app.include_router(module.router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - started
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} in {elapsed:.3f}s")
    return response


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}


@app.get("/readyz")
async def readyz():
    if not await ping_db():
        return JSONResponse(status_code=503, content={"status": "unavailable", "database": "down"})
    return {"status": "ok", "database": "up"}
