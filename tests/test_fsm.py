from __future__ import annotations

import pytest

from app.core.fsm import Action, ConversationState, Event, resolve

IDLE = ConversationState.AWAITING_COMMAND
PENDING = ConversationState.AWAITING_CONFIRMATION


@pytest.mark.parametrize("event", [Event.BUY, Event.SELL])
def test_trade_commands_move_to_confirmation_only_on_success(event: Event) -> None:
    transition = resolve(IDLE, event)
    assert transition is not None
    assert transition.action is Action.TRADE
    assert transition.next_state(True) is PENDING
    assert transition.next_state(False) is IDLE


@pytest.mark.parametrize("event", [Event.HELP, Event.BALANCE, Event.TOKENS, Event.GAS, Event.WATCH])
def test_inline_commands_only_reachable_while_idle(event: Event) -> None:
    transition = resolve(IDLE, event)
    assert transition is not None
    assert transition.next_state(True) is IDLE
    assert transition.next_state(False) is IDLE
    assert resolve(PENDING, event) is None


@pytest.mark.parametrize("state", list(ConversationState))
def test_cancel_always_returns_to_idle(state: ConversationState) -> None:
    transition = resolve(state, Event.CANCEL)
    assert transition is not None
    assert transition.action is Action.CANCEL
    assert transition.next_state(True) is IDLE
    assert transition.next_state(False) is IDLE


def test_callbacks_only_routed_while_confirming() -> None:
    assert resolve(IDLE, Event.CALLBACK) is None
    transition = resolve(PENDING, Event.CALLBACK)
    assert transition is not None
    assert transition.action is Action.CONFIRM
    assert transition.next_state(True) is IDLE
    assert transition.next_state(False) is IDLE


@pytest.mark.parametrize("event", [Event.BUY, Event.SELL])
def test_trade_commands_ignored_while_confirming(event: Event) -> None:
    assert resolve(PENDING, event) is None
