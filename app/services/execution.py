from __future__ import annotations

import logging

from app.core.validation import TradeIntent

logger = logging.getLogger(__name__)


class TradeExecutor:
    """Receives confirmed trades. On-chain submission is not implemented; requests are only logged."""

    async def submit(self, chat_id: int, intent: TradeIntent) -> None:
        logger.info(
            "trade_submission_requested",
            extra={
                "event": "trade_submission_requested",
                "chat_id": chat_id,
                "order_type": intent.order_type.value,
                "contract": intent.contract,
                "amount": intent.amount,
                "slippage": intent.slippage,
            },
        )
