from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Any

import httpx

from app.core.errors import CollaboratorError
from app.core.http import ResilientHTTPClient

WEI_PER_ETH = 10**18
WEI_PER_GWEI = 10**9


@dataclass(frozen=True)
class TokenBalance:
    symbol: str
    amount: float


def _hex_to_int(value: Any) -> int:
    if value in (None, "", "0x"):
        return 0
    return int(str(value), 16)


class AlchemyAdapter:
    """Ethereum JSON-RPC over Alchemy: ETH balance, ERC-20 balances and gas price."""

    def __init__(self, http: ResilientHTTPClient, endpoint: str, wallet_address: str) -> None:
        self.http = http
        self.endpoint = endpoint
        self.wallet_address = wallet_address
        self._ids = itertools.count(1)

    async def _rpc(self, method: str, params: list[Any]) -> Any:
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            data = await self.http.post_json(self.endpoint, payload)
        except (httpx.HTTPError, ValueError) as exc:
            raise CollaboratorError("alchemy", f"{method}: {exc}") from exc

        if not isinstance(data, dict):
            raise CollaboratorError("alchemy", f"{method}: unexpected response")
        if data.get("error"):
            err = data["error"]
            detail = err.get("message", err) if isinstance(err, dict) else err
            raise CollaboratorError("alchemy", f"{method}: {detail}")
        if "result" not in data:
            raise CollaboratorError("alchemy", f"{method}: missing result")
        return data["result"]

    def _address(self, address: str | None) -> str:
        resolved = address or self.wallet_address
        if not resolved:
            raise CollaboratorError("alchemy", "no wallet address configured")
        return resolved

    async def get_eth_balance(self, address: str | None = None) -> float:
        result = await self._rpc("eth_getBalance", [self._address(address), "latest"])
        try:
            return _hex_to_int(result) / WEI_PER_ETH
        except ValueError as exc:
            raise CollaboratorError("alchemy", f"eth_getBalance: bad quantity {result!r}") from exc

    async def get_gas_price_gwei(self) -> float:
        result = await self._rpc("eth_gasPrice", [])
        try:
            return _hex_to_int(result) / WEI_PER_GWEI
        except ValueError as exc:
            raise CollaboratorError("alchemy", f"eth_gasPrice: bad quantity {result!r}") from exc

    async def get_token_balances(self, address: str | None = None) -> list[TokenBalance]:
        result = await self._rpc("alchemy_getTokenBalances", [self._address(address), "erc20"])
        out: list[TokenBalance] = []
        for row in (result or {}).get("tokenBalances", []):
            if row.get("error"):
                continue
            try:
                raw = _hex_to_int(row.get("tokenBalance"))
            except ValueError:
                continue
            if raw == 0:
                continue
            contract = str(row.get("contractAddress", ""))
            meta = await self._rpc("alchemy_getTokenMetadata", [contract]) or {}
            decimals = int(meta.get("decimals") or 0)
            symbol = meta.get("symbol") or contract
            out.append(TokenBalance(symbol=symbol, amount=raw / 10**decimals))
        return out
