from __future__ import annotations

from app.adapters.alchemy import TokenBalance
from app.core.commands import COMMAND_PREFIX, COMMAND_SPECS, OrderType
from app.core.errors import ValidationReason
from app.core.fmt import fmt_amount, fmt_number
from app.core.validation import TradeIntent
from app.services.gas import GasEstimate

CONFIRM_PROMPT = "Do you want to execute the transaction?"
TRADE_EXECUTED = "Transaction executed!"
TRADE_DECLINED = "Transaction was not executed!"
BUTTON_ERROR = "Something went wrong with the button handling"
CANCELLED = "Current command is cancelled"
INVALID_STATE = "Type /help to see available commands."
NOTHING_TO_CONFIRM = "Nothing to confirm."
GENERIC_FAILURE = "Something went wrong on my side. Try again in a few seconds."
WATCH_REJECTED = "Watch wallets cancelled: submitted wallets are incorrect"

REJECTION_MESSAGES: dict[ValidationReason, str] = {
    ValidationReason.WRONG_ARG_COUNT: "Trade cancelled: submitted trade parameters are incorrect!",
    ValidationReason.BAD_ADDRESS: "Trade cancelled: submitted contract is incorrect!",
    ValidationReason.BAD_AMOUNT: "Trade cancelled: submitted amount is incorrect!",
    ValidationReason.BAD_SLIPPAGE: "Trade cancelled: submitted slippage is incorrect!",
}

_ORDER_MARKERS = {OrderType.BUY: "🟢", OrderType.SELL: "🔴"}


def help_text() -> str:
    lines = ["These commands are supported:", ""]
    lines.extend(f"{COMMAND_PREFIX}{command.value} — {description}" for command, description in COMMAND_SPECS)
    return "\n".join(lines)


def trade_intent_template(intent: TradeIntent) -> str:
    if not intent.is_complete:
        raise ValueError("only complete trade intents can be rendered")
    return (
        f"📄 Contract: {intent.contract}\n"
        f"💰Amount: {fmt_number(intent.amount)}\n"
        f"🏷 Slippage: {fmt_number(intent.slippage)}\n"
        f"{_ORDER_MARKERS[intent.order_type]} Order type: {intent.order_type}"
    )


def balance_template(balance: float) -> str:
    return f"Your wallet balance is {fmt_number(balance)} ETH"


def token_balances_template(balances: list[TokenBalance]) -> str:
    message = "ERC-20 Token balances:\n"
    if not balances:
        return message + "\nNo ERC-20 tokens found."
    for tb in balances:
        message += f"\n{tb.symbol}: {fmt_amount(tb.amount)}"
    return message


def gas_template(estimate: GasEstimate) -> str:
    return (
        f"Current eth gas is: {estimate.gas_price_gwei:.0f} gwei\n\n"
        "Estimated fees:\n"
        f"🦄 Uniswap V2 swap: {estimate.uniswap_v2_fee:.2f} $\n"
        f"🦄 Uniswap V3 swap: {estimate.uniswap_v3_fee:.2f} $"
    )


def watchlist_template(wallets: list[str]) -> str:
    rows = ["Wallets to watch:\n"]
    rows.extend(f"\n{i}. {wallet}" for i, wallet in enumerate(wallets, start=1))
    return "".join(rows)


def wallet_change_template(wallet: str, previous: float, current: float) -> str:
    delta = current - previous
    sign = "+" if delta >= 0 else ""
    return (
        "👀 Watched wallet balance changed\n"
        f"{wallet}\n"
        f"{fmt_amount(previous)} ETH → {fmt_amount(current)} ETH ({sign}{fmt_amount(delta)} ETH)"
    )
