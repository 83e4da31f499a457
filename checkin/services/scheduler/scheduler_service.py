"""
Background scheduler for housekeeping tasks.

Removes expired login sessions on a fixed interval. Expiry is already
enforced when a session is resolved, so this only keeps the table small;
it is disabled when SESSION_PURGE_INTERVAL_SECONDS is 0.
"""

import asyncio
from typing import Optional

from checkin.config import settings
from checkin.db import get_db_session
from checkin.services.sessions import session_service
from checkin.utils import logger


class SchedulerService:
    """Background scheduler that purges expired sessions periodically."""

    def __init__(self, interval: int | None = None):
        self._task: Optional[asyncio.Task] = None
        self._running = False
        self.interval = settings.session_purge_interval_seconds if interval is None else interval

    @property
    def enabled(self) -> bool:
        return self.interval > 0

    @property
    def running(self) -> bool:
        return self._running

    async def start(self):
        """Start the background scheduler."""
        if not self.enabled:
            logger.info("Session purge scheduler disabled")
            return
        if self._running:
            logger.warning("Scheduler already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._run_scheduler())
        logger.info(f"Session purge scheduler started (interval={self.interval}s)")

    async def stop(self):
        """Stop the background scheduler gracefully."""
        if not self._running:
            return

        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Session purge scheduler stopped")

    async def _run_scheduler(self):
        """Main scheduler loop."""
        while self._running:
            try:
                await self.purge_once()
            except Exception as e:
                logger.error(f"Scheduler error in session purge: {e}", exc_info=True)

            try:
                await asyncio.sleep(self.interval)
            except asyncio.CancelledError:
                break

    async def purge_once(self) -> int:
        """Run one purge pass in its own database session."""
        async with get_db_session() as db:
            removed = await session_service.purge_expired_sessions(db)
        if removed > 0:
            logger.info(f"Scheduler: Purged {removed} expired session(s)")
        return removed


# Global scheduler instance
scheduler_service = SchedulerService()
