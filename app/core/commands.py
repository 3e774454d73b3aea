from __future__ import annotations

from enum import Enum
from typing import NamedTuple

from app.core.errors import ParseError

COMMAND_PREFIX = "/"


class Command(str, Enum):
    HELP = "help"
    BUY = "buy"
    SELL = "sell"
    BALANCE = "balance"
    TOKENS = "tokens"
    GAS = "gas"
    WATCH = "watch"
    CANCEL = "cancel"


COMMAND_SPECS: tuple[tuple[Command, str], ...] = (
    (Command.HELP, "help command"),
    (Command.BUY, "buy ERC-20 token"),
    (Command.SELL, "sell ERC-20 token"),
    (Command.BALANCE, "get wallet ETH balance"),
    (Command.TOKENS, "get wallet ERC-20 token balances"),
    (Command.GAS, "get current eth gas"),
    (Command.WATCH, "start monitoring ethereum wallets"),
    (Command.CANCEL, "cancel current command"),
)


class OrderType(str, Enum):
    BUY = "buy"
    SELL = "sell"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_command(cls, command: Command) -> "OrderType":
        try:
            return ORDER_TYPE_BY_COMMAND[command]
        except KeyError:
            raise ValueError(f"{command.value} is not a trade command") from None

    def to_command(self) -> Command:
        return COMMAND_BY_ORDER_TYPE[self]


ORDER_TYPE_BY_COMMAND: dict[Command, OrderType] = {
    Command.BUY: OrderType.BUY,
    Command.SELL: OrderType.SELL,
}
COMMAND_BY_ORDER_TYPE: dict[OrderType, Command] = {v: k for k, v in ORDER_TYPE_BY_COMMAND.items()}


class ParsedCommand(NamedTuple):
    keyword: str
    args: list[str]

    @property
    def command(self) -> Command | None:
        try:
            return Command(self.keyword)
        except ValueError:
            return None


def parse_command(text: str, bot_username: str | None) -> ParsedCommand:
    """Split ``/keyword[@handle] arg1 arg2`` into a lower-cased keyword and its argument tokens."""
    raw = (text or "").strip()
    if not raw.startswith(COMMAND_PREFIX):
        raise ParseError("message is not a command")

    body = raw[len(COMMAND_PREFIX):]
    tokens = body.split()
    if not tokens or body[:1].isspace():
        raise ParseError("empty command")

    head, args = tokens[0], tokens[1:]
    keyword, _, mention = head.partition("@")
    if mention and bot_username and mention.lower() != bot_username.lower().lstrip("@"):
        raise ParseError(f"command addressed to @{mention}", foreign=True)
    return ParsedCommand(keyword=keyword.lower(), args=list(args))
