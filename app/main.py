from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import router
from logging_config import configure_logging
from services.dispatcher import build_default_dispatcher


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    dispatcher = build_default_dispatcher()
    dispatcher.start()
    try:
        yield
    finally:
        dispatcher.shutdown()
        build_default_dispatcher.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="AcuRite Bridge",
        description="Relays weather hub uploads to InfluxDB, MQTT, and the AcuRite cloud.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    return app

app = create_app()
