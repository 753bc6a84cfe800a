from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import router
from logging_config import configure_logging
from services.pipeline import build_default_pipeline


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    pipeline = build_default_pipeline()
    pipeline.start()
    try:
        yield
    finally:
        pipeline.stop()
        build_default_pipeline.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Temperature Archiver",
        description="Samples a temperature sensor and archives readings to daily files.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    return app

app = create_app()
