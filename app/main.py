from __future__ import annotations

import asyncio
import contextlib
import logging
import secrets
from contextlib import asynccontextmanager

from aiogram import Bot, Dispatcher
from aiogram.types import BotCommand
from fastapi import FastAPI, HTTPException, Request

from app.adapters.alchemy import AlchemyAdapter
from app.adapters.etherscan import EtherscanAdapter
from app.bot.handlers import init_handlers, router
from app.bot.transport import AiogramTransport
from app.core.cache import RedisCache
from app.core.commands import COMMAND_SPECS
from app.core.config import Settings, get_settings
from app.core.container import ServiceHub
from app.core.conversation import ConversationIntentStore, ConversationStore, IntentStore, SharedIntentStore
from app.core.http import ResilientHTTPClient
from app.core.logging import setup_logging
from app.services.confirmation import ConfirmationService
from app.services.dispatcher import ConversationDispatcher
from app.services.execution import TradeExecutor
from app.services.wallet import WalletService
from app.services.watchlist import WatchlistService
from app.workers.scheduler import WorkerScheduler

logger = logging.getLogger(__name__)


async def _sync_bot_commands(bot: Bot) -> None:
    commands = [BotCommand(command=command.value, description=description) for command, description in COMMAND_SPECS]
    await bot.set_my_commands(commands)


async def _register_webhook(bot: Bot, settings: Settings) -> None:
    url = settings.telegram_webhook_url.rstrip("/") + settings.telegram_webhook_path
    try:
        await bot.set_webhook(url, secret_token=settings.telegram_webhook_secret or None)
    except Exception as exc:  # noqa: BLE001
        # the HTTP app still serves /health and /ready
        logger.exception("webhook_register_failed", extra={"event": "webhook_register_failed", "url": url, "error": str(exc)})
        return
    logger.info("webhook_registered", extra={"event": "webhook_registered", "url": url})


def build_hub(settings: Settings, bot: Bot, cache: RedisCache, http: ResilientHTTPClient) -> ServiceHub:
    transport = AiogramTransport(bot)
    conversations = ConversationStore()
    intents: IntentStore
    if settings.shared_intent_store:
        logger.warning("shared_intent_store_enabled", extra={"event": "shared_intent_store_enabled"})
        intents = SharedIntentStore()
    else:
        intents = ConversationIntentStore(conversations)

    wallet_service = WalletService(
        alchemy=AlchemyAdapter(http=http, endpoint=settings.alchemy_endpoint(), wallet_address=settings.wallet_address),
        etherscan=EtherscanAdapter(
            http=http,
            base_url=settings.etherscan_api_url,
            api_key=settings.etherscan_api_key,
            chain_id=settings.etherscan_chain_id,
        ),
        cache=cache,
        quote_ttl_sec=settings.quote_cache_ttl_sec,
    )
    confirmation_service = ConfirmationService(transport=transport, intents=intents, executor=TradeExecutor())
    dispatcher = ConversationDispatcher(
        transport=transport,
        wallet_service=wallet_service,
        conversations=conversations,
        intents=intents,
        confirmation=confirmation_service,
        persist_partial_intents=settings.persist_partial_intents,
    )

    return ServiceHub(
        bot=bot,
        bot_username=None,
        cache=cache,
        transport=transport,
        conversations=conversations,
        intents=intents,
        wallet_service=wallet_service,
        confirmation_service=confirmation_service,
        dispatcher=dispatcher,
        watchlist_service=WatchlistService(
            intents=intents,
            wallet_service=wallet_service,
            min_change_eth=settings.watch_min_change_eth,
        ),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level)

    if not settings.telegram_bot_token:
        raise RuntimeError("TELEGRAM_BOT_TOKEN is required")

    cache = RedisCache(settings.redis_url)
    http = ResilientHTTPClient(timeout=settings.http_timeout_sec, retries=settings.http_retries)

    bot = Bot(token=settings.telegram_bot_token)
    dp = Dispatcher()

    hub = build_hub(settings, bot, cache, http)
    try:
        me = await bot.get_me()
        hub.bot_username = me.username.lower() if me.username else None
    except Exception:  # noqa: BLE001
        hub.bot_username = None
    hub.dispatcher.bot_username = hub.bot_username

    try:
        await _sync_bot_commands(bot)
    except Exception as exc:  # noqa: BLE001
        logger.warning("set_bot_commands_failed", extra={"event": "set_bot_commands_failed", "error": str(exc)})
    init_handlers(hub)
    dp.include_router(router)

    scheduler = WorkerScheduler(hub)
    scheduler.start()

    polling_task: asyncio.Task | None = None
    if not settings.telegram_use_webhook:
        # getUpdates is refused while a webhook is registered
        try:
            await bot.delete_webhook(drop_pending_updates=False)
        except Exception as exc:  # noqa: BLE001
            logger.warning("delete_webhook_failed", extra={"event": "delete_webhook_failed", "error": str(exc)})
        polling_task = asyncio.create_task(dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types()))
    elif settings.telegram_auto_set_webhook:
        await _register_webhook(bot, settings)

    logger.info(
        "bot_started",
        extra={
            "event": "bot_started",
            "username": hub.bot_username,
            "mode": "webhook" if settings.telegram_use_webhook else "polling",
            "shared_intent_store": settings.shared_intent_store,
        },
    )

    app.state.hub = hub
    app.state.dp = dp

    try:
        yield
    finally:
        await _shutdown(scheduler, polling_task, bot, http, cache)


async def _shutdown(
    scheduler: WorkerScheduler,
    polling_task: asyncio.Task | None,
    bot: Bot,
    http: ResilientHTTPClient,
    cache: RedisCache,
) -> None:
    # stop producers of updates first, then release the clients they use
    scheduler.stop()
    if polling_task is not None:
        polling_task.cancel()
        with contextlib.suppress(asyncio.CancelledError, Exception):
            await polling_task
    for name, close in (("bot_session", bot.session.close), ("http", http.close), ("redis", cache.close)):
        try:
            await close()
        except Exception as exc:  # noqa: BLE001
            logger.warning("shutdown_close_failed", extra={"event": "shutdown_close_failed", "resource": name, "error": str(exc)})
    logger.info("bot_stopped", extra={"event": "bot_stopped"})


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="ERC-20 Trade Bot", version="1.0.0", lifespan=lifespan)

    @app.get("/health")
    async def health() -> dict:
        hub = getattr(app.state, "hub", None)
        return {
            "status": "ok",
            "mode": "webhook" if settings.telegram_use_webhook else "polling",
            "bot": hub.bot_username if hub else None,
        }

    @app.get("/ready")
    async def ready() -> dict:
        hub = app.state.hub
        try:
            redis_ok = bool(await hub.cache.redis.ping())
        except Exception as exc:  # noqa: BLE001
            logger.warning("ready_redis_failed", extra={"event": "ready_redis_failed", "error": str(exc)})
            redis_ok = False
        if not redis_ok:
            raise HTTPException(status_code=503, detail="redis unavailable")
        return {"status": "ready", "conversations": len(hub.conversations.all())}

    if settings.telegram_use_webhook:

        @app.post(settings.telegram_webhook_path)
        async def telegram_webhook(req: Request) -> dict:
            expected = settings.telegram_webhook_secret
            received = req.headers.get("X-Telegram-Bot-Api-Secret-Token", "")
            if expected and not secrets.compare_digest(received, expected):
                raise HTTPException(status_code=403, detail="Invalid secret")
            await app.state.dp.feed_webhook_update(app.state.hub.bot, await req.json())
            return {"ok": True}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("app.main:app", host=settings.host, port=settings.port, reload=False)
