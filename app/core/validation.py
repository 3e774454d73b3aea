from __future__ import annotations

from dataclasses import dataclass

from app.core.commands import OrderType
from app.core.errors import ValidationError, ValidationReason

# ethereum addresses are 42 characters long including the 0x prefix
ADDRESS_PREFIX = "0x"
ADDRESS_LENGTH = 42
TRADE_ARG_COUNT = 3


@dataclass(frozen=True)
class TradeIntent:
    order_type: OrderType
    contract: str | None = None
    amount: float | None = None
    slippage: float | None = None

    @property
    def is_complete(self) -> bool:
        return self.contract is not None and self.amount is not None and self.slippage is not None


@dataclass(frozen=True)
class TradeArgs:
    intent: TradeIntent | None
    reasons: tuple[ValidationReason, ...] = ()

    @property
    def ok(self) -> bool:
        return self.intent is not None and not self.reasons

    def require_complete(self) -> TradeIntent:
        if self.intent is None or self.reasons:
            raise ValidationError(self.reasons or (ValidationReason.WRONG_ARG_COUNT,))
        return self.intent


def is_address(token: str) -> bool:
    """Structural check only: no checksum and no on-chain lookup."""
    return len(token) == ADDRESS_LENGTH and token.startswith(ADDRESS_PREFIX)


def parse_float(token: str) -> float | None:
    # float() also accepts digit separators and non-ASCII digits, a plain numeric literal does not
    if "_" in token or not token.isascii():
        return None
    try:
        return float(token)
    except ValueError:
        return None


def parse_trade_args(args: list[str], order_type: OrderType) -> TradeArgs:
    """Validate ``<contract> <amount> <slippage>`` field by field.

    Every field is checked even when an earlier one fails, so the caller can
    report all problems at once. Amount and slippage are not range-checked:
    zero, negative and >100 values pass through unchanged.
    """
    if len(args) != TRADE_ARG_COUNT:
        return TradeArgs(intent=None, reasons=(ValidationReason.WRONG_ARG_COUNT,))

    raw_contract, raw_amount, raw_slippage = args
    contract = raw_contract if is_address(raw_contract) else None
    amount = parse_float(raw_amount)
    slippage = parse_float(raw_slippage)

    reasons: list[ValidationReason] = []
    if contract is None:
        reasons.append(ValidationReason.BAD_ADDRESS)
    if amount is None:
        reasons.append(ValidationReason.BAD_AMOUNT)
    if slippage is None:
        reasons.append(ValidationReason.BAD_SLIPPAGE)

    intent = TradeIntent(order_type=order_type, contract=contract, amount=amount, slippage=slippage)
    return TradeArgs(intent=intent, reasons=tuple(reasons))


def validate_watch_args(args: list[str]) -> list[str] | None:
    wallets = [token for token in args if is_address(token)]
    return wallets or None
