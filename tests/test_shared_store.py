from __future__ import annotations

import pytest

from app.core.conversation import ConversationStore, SharedIntentStore
from app.core.fsm import ConversationState
from app.services.confirmation import CallbackEvent, ConfirmationService
from app.services.dispatcher import ConversationDispatcher

ADDR_A = "0xaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa"
ADDR_B = "0xbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb"
WALLET = "0x1111111111111111111111111111111111111111"


@pytest.fixture
def legacy_dispatcher(transport, wallet, executor) -> ConversationDispatcher:
    intents = SharedIntentStore()
    return ConversationDispatcher(
        transport=transport,
        wallet_service=wallet,  # type: ignore[arg-type]
        conversations=ConversationStore(),
        intents=intents,
        confirmation=ConfirmationService(transport=transport, intents=intents, executor=executor),
        persist_partial_intents=True,
    )


@pytest.mark.asyncio
async def test_shared_store_lets_another_chat_overwrite_pending_trade(legacy_dispatcher, executor) -> None:
    await legacy_dispatcher.handle_message(1, f"/buy {ADDR_A} 1 1")
    await legacy_dispatcher.handle_message(2, f"/sell {ADDR_B} 5 2")

    prompt_id = legacy_dispatcher.conversations.get(1).prompt_message_id
    await legacy_dispatcher.handle_callback(CallbackEvent("cb", 1, prompt_id, "yes"))

    # chat 1 confirmed its buy of A but executes chat 2's sell of B
    chat_id, intent = executor.submitted[0]
    assert chat_id == 1
    assert intent.contract == ADDR_B
    assert str(intent.order_type) == "sell"


@pytest.mark.asyncio
async def test_partial_intent_overwrites_shared_store(legacy_dispatcher, transport, executor) -> None:
    await legacy_dispatcher.handle_message(1, f"/buy {ADDR_A} 1 1")
    state = await legacy_dispatcher.handle_message(2, "/buy 0xshort 1 1")
    assert state is ConversationState.AWAITING_COMMAND

    intent = await legacy_dispatcher.intents.load_intent(1)
    assert intent.contract is None
    assert intent.amount == 1.0

    prompt_id = legacy_dispatcher.conversations.get(1).prompt_message_id
    await legacy_dispatcher.handle_callback(CallbackEvent("cb", 1, prompt_id, "yes"))
    assert executor.submitted == []
    assert transport.texts(1)[-1] == "Something went wrong with the button handling"


@pytest.mark.asyncio
async def test_wrong_arg_count_never_touches_shared_store(legacy_dispatcher) -> None:
    await legacy_dispatcher.handle_message(1, f"/buy {ADDR_A} 1 1")
    await legacy_dispatcher.handle_message(2, "/buy 0xshort")
    intent = await legacy_dispatcher.intents.load_intent(1)
    assert intent.contract == ADDR_A


@pytest.mark.asyncio
async def test_shared_watch_list_belongs_to_last_writer(legacy_dispatcher) -> None:
    await legacy_dispatcher.handle_message(1, f"/watch {WALLET}")
    await legacy_dispatcher.handle_message(2, f"/watch {ADDR_A}")

    assert await legacy_dispatcher.intents.load_watchlist(1) == [ADDR_A]
    assert await legacy_dispatcher.intents.watched() == [(2, [ADDR_A])]

    await legacy_dispatcher.handle_message(2, "/watch nope")
    assert await legacy_dispatcher.intents.watched() == []
