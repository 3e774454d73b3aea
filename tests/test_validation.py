from __future__ import annotations

import pytest

from app.core.commands import OrderType
from app.core.errors import ValidationError, ValidationReason
from app.core.validation import is_address, parse_trade_args, validate_watch_args

ADDR = "0x1234567890123456789012345678901234567890"


def test_complete_buy_intent() -> None:
    result = parse_trade_args([ADDR, "1.5", "0.5"], OrderType.BUY)
    assert result.ok
    intent = result.require_complete()
    assert intent.contract == ADDR
    assert intent.amount == 1.5
    assert intent.slippage == 0.5
    assert intent.order_type is OrderType.BUY
    assert intent.is_complete


@pytest.mark.parametrize("args", [[], [ADDR], [ADDR, "1"], [ADDR, "1", "1", "1"]])
def test_wrong_arg_count_builds_no_intent(args: list[str]) -> None:
    result = parse_trade_args(args, OrderType.SELL)
    assert result.intent is None
    assert result.reasons == (ValidationReason.WRONG_ARG_COUNT,)
    with pytest.raises(ValidationError) as exc:
        result.require_complete()
    assert exc.value.reasons == (ValidationReason.WRONG_ARG_COUNT,)


def test_fields_are_checked_independently() -> None:
    result = parse_trade_args(["0xshort", "lots", "abc"], OrderType.BUY)
    assert result.intent is not None
    assert result.intent.contract is None
    assert result.intent.amount is None
    assert result.intent.slippage is None
    assert result.reasons == (
        ValidationReason.BAD_ADDRESS,
        ValidationReason.BAD_AMOUNT,
        ValidationReason.BAD_SLIPPAGE,
    )


def test_partial_intent_keeps_valid_fields() -> None:
    result = parse_trade_args(["0xshort", "1.5", "0.5"], OrderType.BUY)
    assert result.reasons == (ValidationReason.BAD_ADDRESS,)
    assert result.intent.amount == 1.5
    assert result.intent.slippage == 0.5
    assert not result.intent.is_complete


@pytest.mark.parametrize("amount,slippage", [("-3", "-1"), ("0", "0"), ("1e3", "150"), ("+2.5", "100.01")])
def test_amount_and_slippage_are_not_range_checked(amount: str, slippage: str) -> None:
    result = parse_trade_args([ADDR, amount, slippage], OrderType.SELL)
    assert result.ok
    assert result.intent.amount == float(amount)
    assert result.intent.slippage == float(slippage)


def test_digit_separators_are_not_numbers() -> None:
    result = parse_trade_args([ADDR, "1_000", "1"], OrderType.BUY)
    assert result.reasons == (ValidationReason.BAD_AMOUNT,)


@pytest.mark.parametrize("token", ["１.５", "١٢", "१"])
def test_non_ascii_digits_are_not_numbers(token: str) -> None:
    result = parse_trade_args([ADDR, "1", token], OrderType.BUY)
    assert result.reasons == (ValidationReason.BAD_SLIPPAGE,)


@pytest.mark.parametrize(
    "token,expected",
    [
        (ADDR, True),
        # no checksum: any 40 characters after the prefix pass
        ("0x" + "z" * 40, True),
        ("0X" + "1" * 40, False),
        ("0x" + "1" * 39, False),
        ("0x" + "1" * 41, False),
        ("1x" + "1" * 40, False),
    ],
)
def test_address_shape(token: str, expected: bool) -> None:
    assert is_address(token) is expected


def test_watch_args_drop_invalid_tokens_in_order() -> None:
    a = "0x1111111111111111111111111111111111111111"
    b = "0x2222222222222222222222222222222222222222"
    assert validate_watch_args([b, "notanaddress", a]) == [b, a]


def test_watch_args_none_when_nothing_valid() -> None:
    assert validate_watch_args(["bad1", "bad2"]) is None
    assert validate_watch_args([]) is None
