from __future__ import annotations

import logging
from contextlib import suppress

from aiogram import Router
from aiogram.types import CallbackQuery, Message

from app.core.container import ServiceHub
from app.services.confirmation import CallbackEvent

router = Router()
_hub: ServiceHub | None = None
logger = logging.getLogger(__name__)


def init_handlers(hub: ServiceHub) -> None:
    global _hub
    _hub = hub


def _require_hub() -> ServiceHub:
    if _hub is None:
        raise RuntimeError("Handlers not initialized")
    return _hub


async def _acquire_message_once(message: Message, ttl: int = 60 * 60 * 6) -> bool:
    hub = _require_hub()
    key = f"seen:message:{message.chat.id}:{message.message_id}"
    try:
        return await hub.cache.set_if_absent(key, ttl=ttl)
    except Exception:  # noqa: BLE001
        logger.exception("dedupe_cache_error", extra={"event": "dedupe_cache_error", "chat_id": message.chat.id})
        return True


async def _acquire_callback_once(callback: CallbackQuery, ttl: int = 60 * 30) -> bool:
    hub = _require_hub()
    cb_id = (callback.id or "").strip()
    if not cb_id:
        return True
    try:
        return await hub.cache.set_if_absent(f"seen:callback:{cb_id}", ttl=ttl)
    except Exception:  # noqa: BLE001
        logger.exception("dedupe_cache_error", extra={"event": "dedupe_cache_error", "callback_id": cb_id})
        return True


@router.callback_query()
async def route_callback(callback: CallbackQuery) -> None:
    if not await _acquire_callback_once(callback):
        with suppress(Exception):
            await callback.answer()
        return

    hub = _require_hub()
    if callback.message is None:
        # prompt too old for Telegram to tell us which chat it belongs to
        with suppress(Exception):
            await callback.answer()
        return

    event = CallbackEvent(
        callback_id=callback.id,
        chat_id=callback.message.chat.id,
        message_id=callback.message.message_id,
        data=callback.data,
    )
    await hub.dispatcher.handle_callback(event)


@router.message()
async def route_message(message: Message) -> None:
    if not await _acquire_message_once(message):
        logger.info(
            "duplicate_message_ignored",
            extra={"event": "duplicate_message_ignored", "chat_id": message.chat.id, "message_id": message.message_id},
        )
        return

    hub = _require_hub()
    await hub.dispatcher.handle_message(message.chat.id, message.text or "")
