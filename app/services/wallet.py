from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from app.adapters.alchemy import AlchemyAdapter, TokenBalance
from app.adapters.etherscan import EtherscanAdapter
from app.core.cache import RedisCache
from app.services.gas import GasEstimate

logger = logging.getLogger(__name__)


class WalletService:
    """Crypto data collaborator used by the bot: balances, gas and ETH price.

    Gas and price quotes are cached briefly; balances are always fetched live.
    """

    def __init__(
        self,
        alchemy: AlchemyAdapter,
        etherscan: EtherscanAdapter,
        cache: RedisCache | None,
        quote_ttl_sec: int = 15,
    ) -> None:
        self.alchemy = alchemy
        self.etherscan = etherscan
        self.cache = cache
        self.quote_ttl_sec = quote_ttl_sec

    async def _cached_quote(self, key: str) -> float | None:
        if self.cache is None:
            return None
        try:
            cached = await self.cache.get_json(key)
        except Exception:  # noqa: BLE001
            logger.warning("quote_cache_read_failed", extra={"event": "quote_cache_read_failed", "key": key})
            return None
        if not cached:
            return None
        return float(cached["value"])

    async def _store_quote(self, key: str, value: float, source: str) -> None:
        if self.cache is None:
            return
        payload = {"value": value, "source": source, "ts": datetime.now(timezone.utc).isoformat()}
        try:
            await self.cache.set_json(key, payload, ttl=self.quote_ttl_sec)
        except Exception:  # noqa: BLE001
            logger.warning("quote_cache_write_failed", extra={"event": "quote_cache_write_failed", "key": key})

    async def get_eth_balance(self, address: str | None = None) -> float:
        return await self.alchemy.get_eth_balance(address)

    async def get_token_balances(self) -> list[TokenBalance]:
        return await self.alchemy.get_token_balances()

    async def get_gas_price_gwei(self) -> float:
        key = "quote:gas_gwei"
        cached = await self._cached_quote(key)
        if cached is not None:
            return cached
        value = await self.alchemy.get_gas_price_gwei()
        await self._store_quote(key, value, "alchemy")
        return value

    async def get_eth_usd_price(self) -> float:
        key = "quote:eth_usd"
        cached = await self._cached_quote(key)
        if cached is not None:
            return cached
        value = await self.etherscan.get_eth_usd_price()
        await self._store_quote(key, value, "etherscan")
        return value

    async def gas_estimate(self) -> GasEstimate:
        gas_price, eth_price = await asyncio.gather(self.get_gas_price_gwei(), self.get_eth_usd_price())
        return GasEstimate(gas_price_gwei=gas_price, eth_usd_price=eth_price)
