from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from app.core.config import get_settings
from app.core.container import ServiceHub

logger = logging.getLogger(__name__)


class WorkerScheduler:
    def __init__(self, hub: ServiceHub) -> None:
        self.hub = hub
        self.settings = get_settings()
        self.scheduler = AsyncIOScheduler(timezone="UTC")

    async def _notify(self, chat_id: int, text: str) -> None:
        await self.hub.transport.send_text(chat_id, text)

    async def _poll_watched_wallets(self) -> None:
        try:
            count = await self.hub.watchlist_service.poll(self._notify)
        except Exception as exc:  # noqa: BLE001
            logger.exception("watch_poll_failed", extra={"event": "watch_poll_failed", "error": str(exc)})
            return
        if count:
            logger.info("watch_changes_notified", extra={"event": "watch_changes_notified", "count": count})

    def start(self) -> None:
        if self.settings.watch_monitor_enabled:
            self.scheduler.add_job(
                self._poll_watched_wallets,
                "interval",
                seconds=self.settings.watch_poll_interval_sec,
                max_instances=1,
            )
        self.scheduler.start()

    def stop(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
