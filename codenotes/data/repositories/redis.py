from typing import Any, Optional

from fastapi import HTTPException
from redis.asyncio import Redis

from codenotes.config import Config, logger

redis_logger = logger.getChild("redis")


class RedisClient:
    """
    Process-wide async Redis connection used for request counters.

    The connection is opened lazily on the first command. Every failure,
    including a failed connect, surfaces as an HTTPException(500).
    """

    _instance = None

    def __new__(cls, *args, **kwargs):
        if not cls._instance:
            instance = super().__new__(cls)
            instance.redis = None
            instance._connected = False
            cls._instance = instance
        return cls._instance

    async def connect(self):
        if self.redis is not None:
            return
        redis = Redis(
            host=Config.REDIS_HOST,
            port=Config.REDIS_PORT,
            db=0,
            password=Config.REDIS_PASSWORD or None,
            decode_responses=True,
        )
        try:
            await redis.ping()
        except Exception as e:
            redis_logger.error(f"Cannot reach Redis at {Config.REDIS_HOST}:{Config.REDIS_PORT}: {e}")
            raise HTTPException(status_code=500, detail=f"Redis connection error: {str(e)}")
        self.redis = redis
        self._connected = True

    async def close(self):
        if self.redis is not None:
            await self.redis.close()
            self.redis = None
            self._connected = False

    async def _execute(self, command: str, *args) -> Any:
        if not self._connected:
            await self.connect()
        try:
            return await getattr(self.redis, command)(*args)
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Redis {command} failed: {str(e)}")

    async def get(self, name: str) -> Any:
        return await self._execute("get", name)

    async def incr(self, name: str) -> int:
        return await self._execute("incr", name)

    async def expire(self, name: str, seconds: int) -> Optional[bool]:
        return await self._execute("expire", name, seconds)

    async def hit(self, name: str, window: int) -> int:
        """Counts one event in a fixed window that starts with the first event."""
        count = await self.incr(name)
        if count == 1:
            await self.expire(name, window)
        return count


redis_client = RedisClient()
