from collections.abc import Mapping

from redis import exceptions as redis_exc

from core.exceptions import AbstractExceptionMapper


class StorageError(Exception):
    def __init__(self, msg: str | None = None):
        self.msg = msg
        super().__init__(msg)


class StorageUnavailableError(StorageError): ...


class StorageTimeoutError(StorageError): ...


class StorageDecodeError(StorageError): ...


class AbstractStorageExceptionMapper[K: Exception](
    AbstractExceptionMapper[K, StorageError]
): ...


class RedisExceptionsMapper(AbstractStorageExceptionMapper[redis_exc.RedisError]):
    EXCEPTION_MAPPING: Mapping[type[redis_exc.RedisError], type[StorageError]] = {
        redis_exc.TimeoutError: StorageTimeoutError,
        redis_exc.ConnectionError: StorageUnavailableError,
    }

    def get_default_exc(self) -> type[StorageError]:
        return StorageError
