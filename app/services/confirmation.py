from __future__ import annotations

import logging
from dataclasses import dataclass

from app.bot.keyboards import YES_NO_OPTIONS
from app.bot.templates import (
    BUTTON_ERROR,
    CONFIRM_PROMPT,
    TRADE_DECLINED,
    TRADE_EXECUTED,
    trade_intent_template,
)
from app.bot.transport import ChatTransport
from app.core.conversation import Conversation, IntentStore
from app.core.errors import TransportError
from app.core.validation import TradeIntent
from app.services.execution import TradeExecutor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallbackEvent:
    callback_id: str
    chat_id: int
    message_id: int | None
    data: str | None


class ConfirmationService:
    def __init__(self, transport: ChatTransport, intents: IntentStore, executor: TradeExecutor) -> None:
        self.transport = transport
        self.intents = intents
        self.executor = executor

    async def render(self, conversation: Conversation, intent: TradeIntent) -> None:
        """Show the trade summary followed by the Yes/No prompt."""
        chat_id = conversation.chat_id
        await self.transport.send_text(chat_id, trade_intent_template(intent))
        conversation.prompt_message_id = await self.transport.send_with_choice(chat_id, CONFIRM_PROMPT, YES_NO_OPTIONS)

    async def _discard(self, chat_id: int, message_id: int) -> None:
        try:
            await self.transport.delete_message(chat_id, message_id)
        except TransportError as exc:
            logger.warning(
                "prompt_delete_failed",
                extra={"event": "prompt_delete_failed", "chat_id": chat_id, "message_id": message_id, "error": str(exc)},
            )

    async def withdraw(self, conversation: Conversation) -> None:
        """Remove a rendered prompt so its buttons cannot be pressed later."""
        prompt_id = conversation.prompt_message_id
        if prompt_id is None:
            return
        conversation.prompt_message_id = None
        await self._discard(conversation.chat_id, prompt_id)

    async def resolve(self, conversation: Conversation, callback: CallbackEvent) -> None:
        """Answer the button press, remove the prompt and act on the choice.

        The caller moves the conversation back to AwaitingCommand whatever
        happens here.
        """
        chat_id = conversation.chat_id
        await self.transport.acknowledge_callback(callback.callback_id)

        live_id = conversation.prompt_message_id
        pressed_id = callback.message_id if callback.message_id is not None else live_id
        if live_id is not None and pressed_id != live_id:
            # button from an older prompt; the pending trade is not the one it showed
            logger.warning(
                "confirmation_stale_prompt",
                extra={"event": "confirmation_stale_prompt", "chat_id": chat_id, "message_id": pressed_id},
            )
            await self._discard(chat_id, pressed_id)
            await self.withdraw(conversation)
            await self.transport.send_text(chat_id, BUTTON_ERROR)
            return

        conversation.prompt_message_id = None
        if pressed_id is not None:
            await self.transport.delete_message(chat_id, pressed_id)

        if callback.data == "yes":
            intent = await self.intents.load_intent(chat_id)
            if intent is None or not intent.is_complete:
                logger.warning("confirmation_intent_missing", extra={"event": "confirmation_intent_missing", "chat_id": chat_id})
                await self.transport.send_text(chat_id, BUTTON_ERROR)
                return
            await self.executor.submit(chat_id, intent)
            await self.transport.send_text(chat_id, TRADE_EXECUTED)
        elif callback.data == "no":
            await self.transport.send_text(chat_id, TRADE_DECLINED)
        else:
            logger.info(
                "confirmation_unknown_payload",
                extra={"event": "confirmation_unknown_payload", "chat_id": chat_id, "data": callback.data},
            )
            await self.transport.send_text(chat_id, BUTTON_ERROR)
