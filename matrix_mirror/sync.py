"""The long-poll loop that keeps the mirror up to date."""

import asyncio
from typing import Any, Dict, Optional, Protocol

from .emitter import Emitter
from .errors import ApiError
from .logger import get_logger
from .rooms import Rooms

logger = get_logger(__name__)

DEFAULT_TIMEOUT_MS = 30000


class SyncTransport(Protocol):
    async def sync(self, since: Optional[str], timeout_ms: int) -> Dict[str, Any]:
        """Return the raw ``/sync`` response body, raising ApiError on failure"""
        ...


class SyncDriver(Emitter):
    """Polls the homeserver and feeds every delta into the room directory.

    Notifications: ``sync(response)`` after each successful poll and
    ``sync_error(error)`` whenever a poll fails. A failed poll never stops
    the loop; the next iteration simply polls again from the same cursor.
    """

    def __init__(
        self,
        transport: SyncTransport,
        rooms: Rooms,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        error_delay: float = 0.0,
    ) -> None:
        self.transport = transport
        self.rooms = rooms
        self.timeout_ms = timeout_ms
        self.error_delay = error_delay
        self.since: Optional[str] = None
        self._task: Optional["asyncio.Task[None]"] = None
        self._stopping = False

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start polling in a background task; no-op if already polling.

        A loop that crashed counts as stopped, so calling this again
        resumes polling from the last cursor.
        """
        if self.is_running:
            return
        self._stopping = False
        self._task = asyncio.get_running_loop().create_task(self._run())
        self._task.add_done_callback(self._log_crash)
        logger.info("Sync loop started")

    def _log_crash(self, task: "asyncio.Task[None]") -> None:
        if not task.cancelled() and task.exception() is not None:
            logger.error("Sync loop crashed", exc_info=task.exception())

    async def stop(self) -> None:
        """Ask the loop to exit and wait for it; no-op if not polling.

        The loop only checks for the stop request between polls, so this
        may take up to one full long-poll timeout.
        """
        if self._task is None:
            return
        self._stopping = True
        try:
            await self._task
        finally:
            self._task = None
            logger.info("Sync loop stopped")

    async def wait(self) -> None:
        """Block until the loop exits, re-raising anything that crashed it"""
        if self._task is not None:
            await asyncio.shield(self._task)

    async def _run(self) -> None:
        while not self._stopping:
            ok = await self.sync_once()
            if not ok and self.error_delay and not self._stopping:
                await asyncio.sleep(self.error_delay)

    async def sync_once(self) -> bool:
        """Run a single poll; returns False if it failed"""
        try:
            response = await self.transport.sync(self.since, self.timeout_ms)
        except ApiError as e:
            logger.error(f"Sync failed: {e}")
            self.emit("sync_error", e)
            return False

        self.process_sync(response)
        return True

    def process_sync(self, response: Dict[str, Any]) -> None:
        if not isinstance(response, dict):
            logger.warning(f"Ignoring unexpected sync response {response!r}")
            return
        next_batch = response.get("next_batch")
        if isinstance(next_batch, str):
            self.since = next_batch
        self.emit("sync", response)
        self.rooms.process_events(response.get("rooms") or {})
