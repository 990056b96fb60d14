from __future__ import annotations

import asyncio
import enum
import logging
from datetime import datetime, timezone
from typing import Optional

from plantmonitor.models import Projection, Reading, ViewState
from plantmonitor.services import derivation
from plantmonitor.services.fake_data import DataSource

logger = logging.getLogger(__name__)


class RefreshResult(enum.Enum):
    OK = "ok"
    FAILED = "failed"
    REJECTED = "rejected"


class ReadingStore:
    """Sole owner of the plant readings and of the connection state.

    Readings are only ever replaced wholesale by a successful poll of the
    data source. At most one refresh runs at a time; overlapping requests
    are rejected.
    """

    def __init__(self, source: DataSource):
        self.source = source
        self._readings: tuple[Reading, ...] = ()
        self.online = False
        self.refreshing = False
        self.last_update: Optional[datetime] = None

    @property
    def readings(self) -> tuple[Reading, ...]:
        return self._readings

    def _set_connection(self, online: bool) -> None:
        self.online = online
        self.last_update = datetime.now(timezone.utc)

    async def load(self) -> RefreshResult:
        return await self.refresh()

    async def refresh(self) -> RefreshResult:
        if self.refreshing:
            logger.debug("Refresh already in progress, rejecting request")
            return RefreshResult.REJECTED

        self.refreshing = True
        try:
            readings = await self.source.poll()
        except Exception:
            # DataSourceError or whatever a real acquisition raises
            logger.exception("Error refreshing plant readings")
            self._set_connection(False)
            return RefreshResult.FAILED
        finally:
            self.refreshing = False

        self._readings = tuple(readings)
        self._set_connection(True)
        return RefreshResult.OK

    def project(self, view: ViewState) -> Projection:
        return derivation.project(self._readings, view.sort_by, view.status_filter)

    def counts(self) -> dict:
        return derivation.compute_counts(self._readings)

    def connection(self) -> dict:
        last = self.last_update
        return {
            "online": self.online,
            "refreshing": self.refreshing,
            "last_update": last.isoformat() if last else None,
            "last_update_display": derivation.format_clock(last.astimezone()) if last else None,
        }


class AutoRefresher:
    """Periodically refreshes ``store`` while it is online.

    Once a refresh fails the store is offline and the timer stops
    refreshing until a manual refresh brings it back.
    """

    def __init__(self, store: ReadingStore, interval_s: float):
        self.store = store
        self.interval_s = interval_s
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())
        logger.info("Auto refresh every %ss", self.interval_s)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Auto refresh stopped")

    async def tick(self) -> Optional[RefreshResult]:
        if not self.store.online:
            return None
        return await self.store.refresh()

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_s)
            try:
                await self.tick()
            except Exception:
                logger.exception("Auto refresh tick failed")
