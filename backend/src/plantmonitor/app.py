from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from plantmonitor.config import Settings, load_config
from plantmonitor.models import ViewState
from plantmonitor.routes.health import router as health_router
from plantmonitor.routes.plants import router as plants_router
from plantmonitor.services.fake_data import DataSource, SimulatedDataSource
from plantmonitor.store import AutoRefresher, ReadingStore

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, source: Optional[DataSource] = None) -> FastAPI:
    settings = settings or load_config()
    if source is None:
        source = SimulatedDataSource(
            settings.plants,
            settings.locations,
            latency_s=settings.refresh_latency_s,
            failure_rate=settings.failure_rate,
            seed=settings.seed,
        )

    store = ReadingStore(source)
    refresher = AutoRefresher(store, settings.refresh_interval_s)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await store.load()
        logger.info("Loaded %d plants (online=%s)", len(store.readings), store.online)
        refresher.start()
        try:
            yield
        finally:
            await refresher.stop()
            logger.info("Plant Monitor shutting down...")

    app = FastAPI(title="Plant Monitor", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.view = ViewState()
    app.state.refresher = refresher

    app.include_router(health_router, prefix="/api")
    app.include_router(plants_router, prefix="/api")
    return app


app = create_app()
