from __future__ import annotations

import pytest

from app.adapters.alchemy import TokenBalance
from app.core.conversation import ConversationIntentStore, ConversationStore
from app.core.errors import CollaboratorError, TransportError
from app.services.confirmation import ConfirmationService
from app.services.dispatcher import ConversationDispatcher
from app.services.gas import GasEstimate


class FakeTransport:
    def __init__(self) -> None:
        self.sent: list[tuple[int, str]] = []
        self.prompts: list[tuple[int, str, list[tuple[str, str]]]] = []
        self.deleted: list[tuple[int, int]] = []
        self.acked: list[tuple[str, str | None]] = []
        self.fail_sends = False
        self.fail_deletes = False
        self._next_id = 100

    def _message_id(self) -> int:
        self._next_id += 1
        return self._next_id

    async def send_text(self, chat_id: int, text: str) -> int:
        if self.fail_sends:
            raise TransportError("send_message", "Bad Gateway")
        self.sent.append((chat_id, text))
        return self._message_id()

    async def send_with_choice(self, chat_id: int, text: str, options: list[tuple[str, str]]) -> int:
        if self.fail_sends:
            raise TransportError("send_message", "Bad Gateway")
        self.prompts.append((chat_id, text, options))
        return self._message_id()

    async def delete_message(self, chat_id: int, message_id: int) -> None:
        if self.fail_deletes:
            raise TransportError("delete_message", "message to delete not found")
        self.deleted.append((chat_id, message_id))

    async def acknowledge_callback(self, callback_id: str, text: str | None = None) -> None:
        self.acked.append((callback_id, text))

    def texts(self, chat_id: int | None = None) -> list[str]:
        return [text for cid, text in self.sent if chat_id is None or cid == chat_id]


class FakeWalletService:
    def __init__(self) -> None:
        self.balance = 1.25
        self.balances: dict[str, float] = {}
        self.tokens = [TokenBalance(symbol="USDC", amount=250.5), TokenBalance(symbol="PEPE", amount=1_000_000.0)]
        self.gas_price_gwei = 30.0
        self.eth_usd_price = 3000.0
        self.fail = False

    async def get_eth_balance(self, address: str | None = None) -> float:
        if self.fail:
            raise CollaboratorError("alchemy", "eth_getBalance: upstream timeout")
        if address is None:
            return self.balance
        return self.balances.get(address, 0.0)

    async def get_token_balances(self) -> list[TokenBalance]:
        if self.fail:
            raise CollaboratorError("alchemy", "alchemy_getTokenBalances: upstream timeout")
        return self.tokens

    async def gas_estimate(self) -> GasEstimate:
        if self.fail:
            raise CollaboratorError("etherscan", "ethprice: rate limited")
        return GasEstimate(gas_price_gwei=self.gas_price_gwei, eth_usd_price=self.eth_usd_price)


class RecordingExecutor:
    def __init__(self) -> None:
        self.submitted: list = []

    async def submit(self, chat_id: int, intent) -> None:
        self.submitted.append((chat_id, intent))


class DummyCache:
    def __init__(self) -> None:
        self.store: dict[str, object] = {}

    async def get_json(self, key: str):
        return self.store.get(key)

    async def set_json(self, key: str, value, ttl: int = 0) -> None:  # noqa: ARG002
        self.store[key] = value

    async def set_if_absent(self, key: str, ttl: int) -> bool:  # noqa: ARG002
        if key in self.store:
            return False
        self.store[key] = "1"
        return True


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def wallet() -> FakeWalletService:
    return FakeWalletService()


@pytest.fixture
def executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def conversations() -> ConversationStore:
    return ConversationStore()


@pytest.fixture
def intents(conversations: ConversationStore) -> ConversationIntentStore:
    return ConversationIntentStore(conversations)


@pytest.fixture
def dispatcher(transport, wallet, conversations, intents, executor) -> ConversationDispatcher:
    confirmation = ConfirmationService(transport=transport, intents=intents, executor=executor)
    return ConversationDispatcher(
        transport=transport,
        wallet_service=wallet,  # type: ignore[arg-type]
        conversations=conversations,
        intents=intents,
        confirmation=confirmation,
        bot_username="tradebot",
    )


@pytest.fixture
def cache() -> DummyCache:
    return DummyCache()
