from __future__ import annotations

import json
from typing import Any

from redis.asyncio import Redis


class RedisCache:
    def __init__(self, url: str) -> None:
        self.redis: Redis = Redis.from_url(url, decode_responses=True)

    async def get_json(self, key: str) -> Any | None:
        raw = await self.redis.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    async def set_json(self, key: str, value: Any, ttl: int = 0) -> None:
        raw = json.dumps(value)
        if ttl > 0:
            await self.redis.set(key, raw, ex=ttl)
        else:
            await self.redis.set(key, raw)

    async def set_if_absent(self, key: str, ttl: int) -> bool:
        """Return True for the first caller to claim ``key`` within ``ttl`` seconds."""
        return bool(await self.redis.set(key, "1", ex=ttl, nx=True))

    async def close(self) -> None:
        await self.redis.aclose()
