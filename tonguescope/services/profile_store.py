import json

import redis.asyncio as redis
from loguru import logger

from tonguescope.core.config import settings
from tonguescope.core.constants import PROFILE_IDENTITY_KEY, PROFILE_ROW_KEY, PROFILE_ROWS_KEY, PROFILE_SEQ_KEY
from tonguescope.core.security import redact_name
from tonguescope.models.profile import Profile


class ProfileStore:
    """
    Redis-backed store of user profiles and their analysis history.

    Each distinct (name, age, gender) gets an internal row id on first write.
    The row id orders `list_all` (newest first) and is never exposed to callers.
    Errors from Redis propagate unchanged; nothing here retries.
    """

    def __init__(self, client: redis.Redis | None = None, key_prefix: str | None = None) -> None:
        self._client = client
        self._owns_client = client is None
        prefix = settings.REDIS_KEY_PREFIX if key_prefix is None else key_prefix
        self._seq_key = PROFILE_SEQ_KEY.format(prefix=prefix)
        self._identity_key = PROFILE_IDENTITY_KEY.format(prefix=prefix)
        self._rows_key = PROFILE_ROWS_KEY.format(prefix=prefix)
        self._prefix = prefix
        if self._owns_client and not settings.REDIS_URL:
            logger.warning("REDIS_URL is not set. Profile storage will fail until a Redis instance is configured.")

    async def _get_client(self) -> redis.Redis:
        if self._client is None:
            logger.info("Creating Redis client for ProfileStore")
            self._client = redis.from_url(
                settings.REDIS_URL,
                decode_responses=True,
                encoding="utf-8",
                socket_connect_timeout=5,
                socket_timeout=5,
                max_connections=settings.REDIS_MAX_CONNECTIONS,
                health_check_interval=30,
                socket_keepalive=True,
            )
        return self._client

    async def close(self) -> None:
        """Close the Redis client if this store created it."""
        if self._client is None or not self._owns_client:
            return
        try:
            await self._client.aclose()
            logger.info("ProfileStore Redis client closed")
        finally:
            self._client = None

    @staticmethod
    def _identity_field(name: str, age: str, gender: str) -> str:
        # JSON keeps the three parts unambiguous whatever characters they contain
        return json.dumps([name, age, gender], ensure_ascii=False)

    def _row_key(self, row_id: int | str) -> str:
        return PROFILE_ROW_KEY.format(prefix=self._prefix, row_id=row_id)

    async def find_by_identity(self, name: str, age: str, gender: str) -> Profile | None:
        client = await self._get_client()
        row_id = await client.hget(self._identity_key, self._identity_field(name, age, gender))
        if row_id is None:
            return None

        raw = await client.get(self._row_key(row_id))
        if raw is None:
            logger.warning(f"Identity index points at missing row {row_id} for {redact_name(name)}")
            return None
        return Profile.model_validate_json(raw)

    async def upsert(self, profile: Profile) -> None:
        """Write the full record, replacing the stored one for the same identity."""
        client = await self._get_client()
        field = self._identity_field(profile.name, profile.age, profile.gender)

        row_id = await client.hget(self._identity_key, field)
        if row_id is None:
            candidate = await client.incr(self._seq_key)
            # HSETNX: a concurrent first write of the same identity keeps whichever row id landed first
            if await client.hsetnx(self._identity_key, field, candidate):
                row_id = candidate
                logger.debug(f"Allocated row {row_id} for profile {redact_name(profile.name)}")
            else:
                row_id = await client.hget(self._identity_key, field)
        row_id = int(row_id)

        payload = profile.model_dump_json(by_alias=True)
        async with client.pipeline(transaction=True) as pipe:
            pipe.set(self._row_key(row_id), payload)
            pipe.hset(self._identity_key, field, row_id)
            pipe.zadd(self._rows_key, {str(row_id): row_id})
            await pipe.execute()

    async def list_all(self) -> list[Profile]:
        """All stored profiles, most recently created first."""
        client = await self._get_client()
        row_ids = await client.zrevrange(self._rows_key, 0, -1)
        if not row_ids:
            return []

        raws = await client.mget([self._row_key(row_id) for row_id in row_ids])
        return [Profile.model_validate_json(raw) for raw in raws if raw is not None]

    async def delete(self, name: str, age: str, gender: str) -> bool:
        client = await self._get_client()
        field = self._identity_field(name, age, gender)
        row_id = await client.hget(self._identity_key, field)
        if row_id is None:
            return False

        async with client.pipeline(transaction=True) as pipe:
            pipe.delete(self._row_key(row_id))
            pipe.hdel(self._identity_key, field)
            pipe.zrem(self._rows_key, str(row_id))
            await pipe.execute()
        return True
