from __future__ import annotations

from typing import Protocol

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError

from app.bot.keyboards import choice_keyboard
from app.core.errors import TransportError


class ChatTransport(Protocol):
    async def send_text(self, chat_id: int, text: str) -> int: ...

    async def send_with_choice(self, chat_id: int, text: str, options: list[tuple[str, str]]) -> int: ...

    async def delete_message(self, chat_id: int, message_id: int) -> None: ...

    async def acknowledge_callback(self, callback_id: str, text: str | None = None) -> None: ...


class AiogramTransport:
    """ChatTransport backed by the Telegram Bot API; API failures surface as TransportError."""

    def __init__(self, bot: Bot) -> None:
        self.bot = bot

    async def send_text(self, chat_id: int, text: str) -> int:
        try:
            message = await self.bot.send_message(chat_id=chat_id, text=text)
        except TelegramAPIError as exc:
            raise TransportError("send_message", str(exc)) from exc
        return message.message_id

    async def send_with_choice(self, chat_id: int, text: str, options: list[tuple[str, str]]) -> int:
        try:
            message = await self.bot.send_message(chat_id=chat_id, text=text, reply_markup=choice_keyboard(options))
        except TelegramAPIError as exc:
            raise TransportError("send_message", str(exc)) from exc
        return message.message_id

    async def delete_message(self, chat_id: int, message_id: int) -> None:
        try:
            await self.bot.delete_message(chat_id=chat_id, message_id=message_id)
        except TelegramAPIError as exc:
            raise TransportError("delete_message", str(exc)) from exc

    async def acknowledge_callback(self, callback_id: str, text: str | None = None) -> None:
        try:
            await self.bot.answer_callback_query(callback_query_id=callback_id, text=text)
        except TelegramAPIError as exc:
            raise TransportError("answer_callback_query", str(exc)) from exc
