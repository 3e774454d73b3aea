from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

_RETRY_STATUSES = {429, 500, 502, 503, 504}


class ResilientHTTPClient:
    """Shared httpx client that retries transient failures with linear backoff."""

    def __init__(
        self,
        timeout: float = 10.0,
        retries: int = 2,
        backoff_sec: float = 0.5,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.retries = max(0, retries)
        self.backoff_sec = backoff_sec
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport, follow_redirects=True)

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        attempt = 0
        while True:
            try:
                resp = await self.client.request(method, url, **kwargs)
                if resp.status_code in _RETRY_STATUSES and attempt < self.retries:
                    raise httpx.HTTPStatusError(f"retryable status {resp.status_code}", request=resp.request, response=resp)
                resp.raise_for_status()
                return resp.json()
            except (httpx.TransportError, httpx.HTTPStatusError) as exc:
                retryable = isinstance(exc, httpx.TransportError) or exc.response.status_code in _RETRY_STATUSES
                if not retryable or attempt >= self.retries:
                    raise
                attempt += 1
                logger.warning(
                    "http_retry",
                    extra={"event": "http_retry", "url": url, "attempt": attempt, "error": str(exc)},
                )
                await asyncio.sleep(self.backoff_sec * attempt)

    async def get_json(self, url: str, params: dict | None = None, headers: dict | None = None) -> Any:
        return await self._request("GET", url, params=params, headers=headers)

    async def post_json(self, url: str, payload: Any, headers: dict | None = None) -> Any:
        return await self._request("POST", url, json=payload, headers=headers)

    async def close(self) -> None:
        await self.client.aclose()
