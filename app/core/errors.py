from __future__ import annotations

from enum import Enum


class ParseError(ValueError):
    """Raised when message text is not a command addressed to this bot."""

    def __init__(self, message: str, foreign: bool = False) -> None:
        super().__init__(message)
        self.foreign = foreign


class ValidationReason(str, Enum):
    BAD_ADDRESS = "bad_address"
    BAD_AMOUNT = "bad_amount"
    BAD_SLIPPAGE = "bad_slippage"
    WRONG_ARG_COUNT = "wrong_arg_count"


class ValidationError(ValueError):
    def __init__(self, reasons: tuple[ValidationReason, ...]) -> None:
        super().__init__(", ".join(r.value for r in reasons))
        self.reasons = reasons


class TransportError(RuntimeError):
    def __init__(self, operation: str, detail: str) -> None:
        super().__init__(f"{operation} failed: {detail}")
        self.operation = operation


class CollaboratorError(RuntimeError):
    def __init__(self, provider: str, detail: str) -> None:
        super().__init__(f"{provider}: {detail}")
        self.provider = provider
