from __future__ import annotations

import logging
from typing import Awaitable, Callable

from app.bot.templates import wallet_change_template
from app.core.conversation import IntentStore
from app.core.errors import CollaboratorError, TransportError
from app.services.wallet import WalletService

logger = logging.getLogger(__name__)

Notify = Callable[[int, str], Awaitable[None]]


class WatchlistService:
    """Polls ETH balances of watched wallets and reports changes to the chat that watches them.

    The first observation of a wallet only records a baseline.
    """

    def __init__(self, intents: IntentStore, wallet_service: WalletService, min_change_eth: float = 0.0) -> None:
        self.intents = intents
        self.wallet_service = wallet_service
        self.min_change_eth = min_change_eth
        self._last_seen: dict[tuple[int, str], float] = {}

    async def poll(self, notify: Notify) -> int:
        watched = await self.intents.watched()
        active = {(chat_id, wallet) for chat_id, wallets in watched for wallet in wallets}
        for key in [k for k in self._last_seen if k not in active]:
            self._last_seen.pop(key, None)

        sent = 0
        for chat_id, wallets in watched:
            for wallet in wallets:
                try:
                    balance = await self.wallet_service.get_eth_balance(wallet)
                except CollaboratorError as exc:
                    logger.warning(
                        "watch_balance_failed",
                        extra={"event": "watch_balance_failed", "chat_id": chat_id, "wallet": wallet, "error": str(exc)},
                    )
                    continue

                key = (chat_id, wallet)
                previous = self._last_seen.get(key)
                if previous is None or abs(balance - previous) <= self.min_change_eth:
                    self._last_seen[key] = balance
                    continue
                try:
                    await notify(chat_id, wallet_change_template(wallet, previous, balance))
                except TransportError as exc:
                    # baseline stays put so the change is reported on a later poll
                    logger.warning(
                        "watch_notify_failed",
                        extra={"event": "watch_notify_failed", "chat_id": chat_id, "wallet": wallet, "error": str(exc)},
                    )
                    continue
                self._last_seen[key] = balance
                sent += 1
        return sent
