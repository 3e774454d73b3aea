from __future__ import annotations

from aiogram.types import InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

YES_NO_OPTIONS: list[tuple[str, str]] = [("No", "no"), ("Yes", "yes")]


def choice_keyboard(options: list[tuple[str, str]]) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    for text, value in options:
        kb.button(text=text, callback_data=value)
    kb.adjust(len(options))
    return kb.as_markup()
