from __future__ import annotations

import logging
from contextlib import suppress
from typing import Any, Awaitable, Callable

from app.bot.templates import (
    CANCELLED,
    GENERIC_FAILURE,
    INVALID_STATE,
    NOTHING_TO_CONFIRM,
    REJECTION_MESSAGES,
    WATCH_REJECTED,
    balance_template,
    gas_template,
    help_text,
    token_balances_template,
    watchlist_template,
)
from app.bot.transport import ChatTransport
from app.core.commands import Command, OrderType, ParsedCommand, parse_command
from app.core.conversation import Conversation, ConversationStore, IntentStore
from app.core.errors import CollaboratorError, ParseError, TransportError, ValidationError
from app.core.fsm import Action, ConversationState, Event, Transition, resolve
from app.core.validation import parse_trade_args, validate_watch_args
from app.services.confirmation import CallbackEvent, ConfirmationService
from app.services.wallet import WalletService

logger = logging.getLogger(__name__)

ActionHandler = Callable[[Conversation, Any], Awaitable[bool]]


class ConversationDispatcher:
    """Routes chat messages and button callbacks through the conversation state machine.

    Each chat is handled under its own lock, so events from one chat run one
    at a time in arrival order while different chats proceed concurrently.
    Transport and data-provider failures are contained here: they are logged,
    the user gets a generic apology and the conversation falls back to the
    transition's failure state.
    """

    def __init__(
        self,
        transport: ChatTransport,
        wallet_service: WalletService,
        conversations: ConversationStore,
        intents: IntentStore,
        confirmation: ConfirmationService,
        bot_username: str | None = None,
        persist_partial_intents: bool = False,
    ) -> None:
        self.transport = transport
        self.wallet_service = wallet_service
        self.conversations = conversations
        self.intents = intents
        self.confirmation = confirmation
        self.bot_username = bot_username
        self.persist_partial_intents = persist_partial_intents
        self._actions: dict[Action, ActionHandler] = {
            Action.HELP: self._help,
            Action.TRADE: self._trade,
            Action.BALANCE: self._balance,
            Action.TOKENS: self._tokens,
            Action.GAS: self._gas,
            Action.WATCH: self._watch,
            Action.CANCEL: self._cancel,
            Action.CONFIRM: self._confirm,
        }

    async def handle_message(self, chat_id: int, text: str) -> ConversationState:
        try:
            parsed: ParsedCommand | None = parse_command(text, self.bot_username)
        except ParseError as exc:
            if exc.foreign:
                return self.conversations.get(chat_id).state
            parsed = None
        command = parsed.command if parsed else None

        async with self.conversations.lock(chat_id):
            conversation = self.conversations.get(chat_id)
            transition = resolve(conversation.state, Event.from_command(command)) if command else None
            if transition is None:
                logger.info(
                    "message_unhandled",
                    extra={"event": "message_unhandled", "chat_id": chat_id, "state": conversation.state.value},
                )
                await self._send_guarded(chat_id, INVALID_STATE)
                return conversation.state
            await self._run(conversation, transition, parsed)
            return conversation.state

    async def handle_callback(self, callback: CallbackEvent) -> ConversationState:
        chat_id = callback.chat_id
        async with self.conversations.lock(chat_id):
            conversation = self.conversations.get(chat_id)
            transition = resolve(conversation.state, Event.CALLBACK)
            if transition is None:
                logger.info(
                    "callback_unhandled",
                    extra={"event": "callback_unhandled", "chat_id": chat_id, "state": conversation.state.value},
                )
                try:
                    await self.transport.acknowledge_callback(callback.callback_id, NOTHING_TO_CONFIRM)
                except TransportError:
                    logger.exception("callback_ack_failed", extra={"event": "callback_ack_failed", "chat_id": chat_id})
                return conversation.state
            await self._run(conversation, transition, callback)
            return conversation.state

    async def _run(self, conversation: Conversation, transition: Transition, payload: Any) -> None:
        handler = self._actions[transition.action]
        try:
            succeeded = await handler(conversation, payload)
        except (TransportError, CollaboratorError) as exc:
            logger.exception(
                "action_failed",
                extra={
                    "event": "action_failed",
                    "chat_id": conversation.chat_id,
                    "action": transition.action.value,
                    "error": str(exc),
                },
            )
            succeeded = False
            with suppress(TransportError):
                await self.transport.send_text(conversation.chat_id, GENERIC_FAILURE)
        previous = conversation.state
        conversation.state = transition.next_state(succeeded)
        if previous != conversation.state:
            logger.info(
                "conversation_transition",
                extra={
                    "event": "conversation_transition",
                    "chat_id": conversation.chat_id,
                    "from": previous.value,
                    "to": conversation.state.value,
                },
            )

    async def _send_guarded(self, chat_id: int, text: str) -> None:
        try:
            await self.transport.send_text(chat_id, text)
        except TransportError:
            logger.exception("send_failed", extra={"event": "send_failed", "chat_id": chat_id})

    async def _help(self, conversation: Conversation, _: ParsedCommand) -> bool:
        await self.transport.send_text(conversation.chat_id, help_text())
        return True

    async def _trade(self, conversation: Conversation, parsed: ParsedCommand) -> bool:
        chat_id = conversation.chat_id
        order_type = OrderType.from_command(Command(parsed.keyword))
        result = parse_trade_args(parsed.args, order_type)

        if result.intent is not None and (result.ok or self.persist_partial_intents):
            await self.intents.save_intent(chat_id, result.intent)

        try:
            intent = result.require_complete()
        except ValidationError as exc:
            logger.info(
                "trade_rejected",
                extra={"event": "trade_rejected", "chat_id": chat_id, "reasons": [r.value for r in exc.reasons]},
            )
            for reason in exc.reasons:
                await self.transport.send_text(chat_id, REJECTION_MESSAGES[reason])
            return False

        await self.confirmation.render(conversation, intent)
        return True

    async def _balance(self, conversation: Conversation, _: ParsedCommand) -> bool:
        balance = await self.wallet_service.get_eth_balance()
        await self.transport.send_text(conversation.chat_id, balance_template(balance))
        return True

    async def _tokens(self, conversation: Conversation, _: ParsedCommand) -> bool:
        balances = await self.wallet_service.get_token_balances()
        await self.transport.send_text(conversation.chat_id, token_balances_template(balances))
        return True

    async def _gas(self, conversation: Conversation, _: ParsedCommand) -> bool:
        estimate = await self.wallet_service.gas_estimate()
        await self.transport.send_text(conversation.chat_id, gas_template(estimate))
        return True

    async def _watch(self, conversation: Conversation, parsed: ParsedCommand) -> bool:
        chat_id = conversation.chat_id
        wallets = validate_watch_args(parsed.args)
        # the previous list is replaced even when nothing valid was submitted
        await self.intents.save_watchlist(chat_id, wallets or [])
        if wallets is None:
            await self.transport.send_text(chat_id, WATCH_REJECTED)
            return True
        await self.transport.send_text(chat_id, watchlist_template(wallets))
        return True

    async def _cancel(self, conversation: Conversation, _: ParsedCommand) -> bool:
        await self.confirmation.withdraw(conversation)
        await self.transport.send_text(conversation.chat_id, CANCELLED)
        return True

    async def _confirm(self, conversation: Conversation, callback: CallbackEvent) -> bool:
        await self.confirmation.resolve(conversation, callback)
        return True
