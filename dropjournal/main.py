import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from dropjournal.api.endpoints import router
from dropjournal.api.routes import health
from dropjournal.core.config import settings
from dropjournal.core.tracing import instrument_app, setup_tracing, shutdown_tracing
from dropjournal.services.http_client import http_client_manager
from dropjournal.shared.correlation import CorrelationMiddleware
from dropjournal.shared.errors import register_exception_handlers
from dropjournal.shared.logging_config import setup_logging

logger = logging.getLogger("DropJournal.Main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await http_client_manager.startup()
    logger.info(f"{settings.SERVICE_NAME} started ({settings.STORAGE_BACKEND} storage)")
    yield
    await http_client_manager.shutdown()
    shutdown_tracing()


def create_app() -> FastAPI:
    setup_logging(service_name=settings.SERVICE_NAME)
    setup_tracing(settings.SERVICE_NAME)

    app = FastAPI(
        title="Drop Journal Service",
        description="Daily journaling questions, companion chat and periodic analyses",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.add_middleware(CorrelationMiddleware)
    register_exception_handlers(app)
    instrument_app(app)

    app.include_router(router, prefix="/api")
    app.include_router(health.router)

    @app.get("/")
    async def root():
        return {"message": "Drop Journal Service Running"}

    return app


app = create_app()
