from redis.asyncio import Redis
from redis.exceptions import RedisError

from gateways.exceptions import (
    AbstractStorageExceptionMapper,
    RedisExceptionsMapper,
    StorageDecodeError,
)


class RedisStorage:
    """Key-value storage on top of plain redis strings"""

    def __init__(
        self,
        client: Redis,
        exception_mapper: AbstractStorageExceptionMapper = RedisExceptionsMapper(),
        key_prefix: str = "",
    ):
        self._client = client
        self._exception_mapper = exception_mapper
        self._key_prefix = key_prefix

    @classmethod
    def from_url(cls, url: str, key_prefix: str = "", **kwargs) -> "RedisStorage":
        client = Redis.from_url(url, decode_responses=True, **kwargs)
        return cls(client, key_prefix=key_prefix)

    def _build_key(self, key: str) -> str:
        return self._key_prefix + key

    async def get(self, key: str) -> str | None:
        try:
            return await self._client.get(self._build_key(key))
        except RedisError as e:
            self._exception_mapper.map_and_raise(e)
        except UnicodeDecodeError as e:
            raise StorageDecodeError(f"Value under key {key} is not valid utf-8") from e

    async def set(self, key: str, value: str) -> None:
        try:
            await self._client.set(self._build_key(key), value)
        except RedisError as e:
            self._exception_mapper.map_and_raise(e)

    async def ping(self) -> None:
        try:
            await self._client.ping()  # type: ignore
        except RedisError as e:
            self._exception_mapper.map_and_raise(e)

    async def aclose(self) -> None:
        await self._client.aclose()
