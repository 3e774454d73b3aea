from __future__ import annotations

from dataclasses import dataclass

from aiogram import Bot

from app.bot.transport import ChatTransport
from app.core.cache import RedisCache
from app.core.conversation import ConversationStore, IntentStore
from app.services.confirmation import ConfirmationService
from app.services.dispatcher import ConversationDispatcher
from app.services.wallet import WalletService
from app.services.watchlist import WatchlistService


@dataclass
class ServiceHub:
    bot: Bot
    bot_username: str | None
    cache: RedisCache
    transport: ChatTransport
    conversations: ConversationStore
    intents: IntentStore
    wallet_service: WalletService
    confirmation_service: ConfirmationService
    dispatcher: ConversationDispatcher
    watchlist_service: WatchlistService
