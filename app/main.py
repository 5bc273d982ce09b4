from __future__ import annotations
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import router
from datastore.summary_table import build_default_table
from logging_config import configure_logging
from providers.openweather import build_default_provider
from services.monitor import build_default_monitor
from settings import get_settings


def _close_cached(factory: Any) -> None:
    if factory.cache_info().currsize:
        factory().close()
    factory.cache_clear()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    monitor = build_default_monitor()
    monitor.start()
    try:
        yield
    finally:
        monitor.shutdown()
        build_default_monitor.cache_clear()
        _close_cached(build_default_provider)
        _close_cached(build_default_table)


def create_app() -> FastAPI:
    configure_logging()
    settings = get_settings()
    app = FastAPI(
        title="Weather Monitor",
        description="Polls current conditions per location and raises temperature alerts.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.include_router(router)
    return app

app = create_app()
