from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Protocol

from app.core.fsm import ConversationState
from app.core.validation import TradeIntent

_CHAT_LOCKS_MAX = 2000


@dataclass
class Conversation:
    chat_id: int
    state: ConversationState = ConversationState.AWAITING_COMMAND
    intent: TradeIntent | None = None
    watchlist: list[str] = field(default_factory=list)
    prompt_message_id: int | None = None


class ConversationStore:
    """In-memory conversations keyed by chat id, plus one lock per chat.

    Conversations are created on first use and live for the process lifetime.
    """

    def __init__(self, max_locks: int = _CHAT_LOCKS_MAX) -> None:
        self._conversations: dict[int, Conversation] = {}
        self._locks: dict[int, asyncio.Lock] = {}
        self.max_locks = max_locks

    def get(self, chat_id: int) -> Conversation:
        conversation = self._conversations.get(chat_id)
        if conversation is None:
            conversation = Conversation(chat_id=chat_id)
            self._conversations[chat_id] = conversation
        return conversation

    def peek(self, chat_id: int) -> Conversation | None:
        return self._conversations.get(chat_id)

    def all(self) -> list[Conversation]:
        return list(self._conversations.values())

    def lock(self, chat_id: int) -> asyncio.Lock:
        lock = self._locks.get(chat_id)
        if lock is None:
            # prune idle locks so the dict cannot grow without bound
            if len(self._locks) >= self.max_locks:
                idle = [k for k, v in list(self._locks.items()) if not v.locked()]
                for k in idle[: len(idle) // 2 + 1]:
                    self._locks.pop(k, None)
            lock = asyncio.Lock()
            self._locks[chat_id] = lock
        return lock


class IntentStore(Protocol):
    async def save_intent(self, chat_id: int, intent: TradeIntent) -> None: ...

    async def load_intent(self, chat_id: int) -> TradeIntent | None: ...

    async def save_watchlist(self, chat_id: int, wallets: list[str]) -> None: ...

    async def load_watchlist(self, chat_id: int) -> list[str]: ...

    async def watched(self) -> list[tuple[int, list[str]]]: ...


class ConversationIntentStore:
    """Keeps intents and watch lists on the conversation that produced them."""

    def __init__(self, conversations: ConversationStore) -> None:
        self.conversations = conversations

    async def save_intent(self, chat_id: int, intent: TradeIntent) -> None:
        self.conversations.get(chat_id).intent = intent

    async def load_intent(self, chat_id: int) -> TradeIntent | None:
        conversation = self.conversations.peek(chat_id)
        return conversation.intent if conversation else None

    async def save_watchlist(self, chat_id: int, wallets: list[str]) -> None:
        self.conversations.get(chat_id).watchlist = list(wallets)

    async def load_watchlist(self, chat_id: int) -> list[str]:
        conversation = self.conversations.peek(chat_id)
        return list(conversation.watchlist) if conversation else []

    async def watched(self) -> list[tuple[int, list[str]]]:
        return [(c.chat_id, list(c.watchlist)) for c in self.conversations.all() if c.watchlist]


class SharedIntentStore:
    """Single process-wide intent and watch list, shared by every chat.

    A buy/sell from one chat overwrites the intent another chat is about to
    confirm, and /watch from any chat replaces the only watch list.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._intent: TradeIntent | None = None
        self._watchlist: list[str] = []
        self._watch_owner: int | None = None

    async def save_intent(self, chat_id: int, intent: TradeIntent) -> None:  # noqa: ARG002
        async with self._lock:
            self._intent = intent

    async def load_intent(self, chat_id: int) -> TradeIntent | None:  # noqa: ARG002
        async with self._lock:
            return self._intent

    async def save_watchlist(self, chat_id: int, wallets: list[str]) -> None:
        async with self._lock:
            self._watchlist = list(wallets)
            self._watch_owner = chat_id

    async def load_watchlist(self, chat_id: int) -> list[str]:  # noqa: ARG002
        async with self._lock:
            return list(self._watchlist)

    async def watched(self) -> list[tuple[int, list[str]]]:
        async with self._lock:
            if self._watch_owner is None or not self._watchlist:
                return []
            return [(self._watch_owner, list(self._watchlist))]
