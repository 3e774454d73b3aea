from __future__ import annotations

import httpx

from app.core.errors import CollaboratorError
from app.core.http import ResilientHTTPClient


class EtherscanAdapter:
    def __init__(self, http: ResilientHTTPClient, base_url: str, api_key: str, chain_id: int = 1) -> None:
        self.http = http
        self.base_url = base_url
        self.api_key = api_key
        self.chain_id = chain_id

    async def get_eth_usd_price(self) -> float:
        params = {"chainid": self.chain_id, "module": "stats", "action": "ethprice", "apikey": self.api_key}
        try:
            data = await self.http.get_json(self.base_url, params=params)
        except (httpx.HTTPError, ValueError) as exc:
            raise CollaboratorError("etherscan", f"ethprice: {exc}") from exc

        if not isinstance(data, dict) or str(data.get("status")) != "1":
            detail = data.get("result") if isinstance(data, dict) else data
            raise CollaboratorError("etherscan", f"ethprice: {detail}")
        try:
            return float(data["result"]["ethusd"])
        except (KeyError, TypeError, ValueError) as exc:
            raise CollaboratorError("etherscan", f"ethprice: malformed result {data.get('result')!r}") from exc
