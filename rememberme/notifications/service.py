import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator

from rememberme.core.config import settings
from rememberme.db.base import Base
from rememberme.db.session import SessionLocal, engine

from .api import router as preferences_router
from .delivery import get_sender
from .sweep import SweepLoop

logger = logging.getLogger(__name__)


def build_sweep_loop() -> SweepLoop:
    return SweepLoop(
        session_factory=SessionLocal,
        sender=get_sender(),
        batch_size=settings.SCHEDULER_BATCH_SIZE,
        max_workers=settings.SCHEDULER_MAX_WORKERS,
        interval_seconds=settings.SCHEDULER_SCAN_INTERVAL_SECONDS,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    import rememberme.models  # noqa: F401  registers tables on Base.metadata
    Base.metadata.create_all(bind=engine)

    sweep_loop = None
    if settings.SCHEDULER_ENABLED:
        sweep_loop = build_sweep_loop()
        sweep_loop.start()
    app.state.sweep_loop = sweep_loop
    try:
        yield
    finally:
        if sweep_loop is not None:
            sweep_loop.stop()


def create_app() -> FastAPI:
    app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)
    app.include_router(
        preferences_router,
        prefix=f"{settings.API_V1_STR}/notifications/preferences",
        tags=["notifications"],
    )
    if settings.METRICS_ENABLED:
        Instrumentator().instrument(app).expose(app, endpoint="/metrics")
    return app


app = create_app()


def serve() -> None:
    uvicorn.run(
        "rememberme.notifications.service:app",
        host=settings.SERVICE_HOST,
        port=settings.SERVICE_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    serve()
