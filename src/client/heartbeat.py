import asyncio
import logging
from typing import Optional

import httpx

from src.client.api_client import SessionApiClient, SessionApiError

logger = logging.getLogger(__name__)


class HeartbeatLoop:
    """
    Keeps an idle client's session alive.

    Stops once the client may no longer continue (forced logout). Network
    errors and store outages are retried on the next tick; the server stays
    the authority on whether the session ended.
    """

    def __init__(self, client: SessionApiClient, interval_seconds: Optional[float] = None):
        self.client = client
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if not self.running:
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def wait(self) -> None:
        if self._task is not None:
            await self._task

    async def _run(self) -> None:
        while self.client.may_continue():
            interval = self.interval_seconds
            if interval is None:
                interval = self.client.heartbeat_interval_seconds
            await asyncio.sleep(interval)
            try:
                await self.client.heartbeat()
            except SessionApiError as exc:
                if exc.status_code == 401:
                    break
                logger.warning("Heartbeat failed with %s, retrying", exc.status_code)
            except httpx.TransportError as exc:
                logger.warning("Heartbeat could not reach the server: %s", exc)
        logger.info("Heartbeat loop stopped")
