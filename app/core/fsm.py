from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from app.core.commands import Command


class ConversationState(str, Enum):
    AWAITING_COMMAND = "awaiting_command"
    AWAITING_CONFIRMATION = "awaiting_confirmation"


class Event(str, Enum):
    HELP = "help"
    BUY = "buy"
    SELL = "sell"
    BALANCE = "balance"
    TOKENS = "tokens"
    GAS = "gas"
    WATCH = "watch"
    CANCEL = "cancel"
    CALLBACK = "callback"

    @classmethod
    def from_command(cls, command: Command) -> "Event":
        return cls(command.value)


class Action(str, Enum):
    HELP = "help"
    TRADE = "trade"
    BALANCE = "balance"
    TOKENS = "tokens"
    GAS = "gas"
    WATCH = "watch"
    CANCEL = "cancel"
    CONFIRM = "confirm"


@dataclass(frozen=True)
class Transition:
    action: Action
    on_success: ConversationState
    on_failure: ConversationState

    def next_state(self, succeeded: bool) -> ConversationState:
        return self.on_success if succeeded else self.on_failure


_IDLE = ConversationState.AWAITING_COMMAND
_PENDING = ConversationState.AWAITING_CONFIRMATION


def _inline(action: Action) -> Transition:
    return Transition(action=action, on_success=_IDLE, on_failure=_IDLE)


TRANSITIONS: dict[tuple[ConversationState, Event], Transition] = {
    (_IDLE, Event.HELP): _inline(Action.HELP),
    (_IDLE, Event.BUY): Transition(action=Action.TRADE, on_success=_PENDING, on_failure=_IDLE),
    (_IDLE, Event.SELL): Transition(action=Action.TRADE, on_success=_PENDING, on_failure=_IDLE),
    (_IDLE, Event.BALANCE): _inline(Action.BALANCE),
    (_IDLE, Event.TOKENS): _inline(Action.TOKENS),
    (_IDLE, Event.GAS): _inline(Action.GAS),
    (_IDLE, Event.WATCH): _inline(Action.WATCH),
    (_IDLE, Event.CANCEL): _inline(Action.CANCEL),
    (_PENDING, Event.CANCEL): _inline(Action.CANCEL),
    (_PENDING, Event.CALLBACK): _inline(Action.CONFIRM),
}


def resolve(state: ConversationState, event: Event) -> Transition | None:
    """Look up the transition for ``event`` in ``state``; None means the pair is not handled."""
    return TRANSITIONS.get((state, event))
