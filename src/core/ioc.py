from logging import Logger
import typing as t
from functools import lru_cache

import punq
from fastapi import Depends
from cart.domain.interfaces import KeyValueStorageI
from cart.domain.store import CartStore
from cart.provider import CartProvider
from core.logger import setup_logger
from core.exception_mappers import HTTPExceptionsMapper
from gateways.memory import InMemoryStorage
from gateways.redis import RedisStorage
from config import Config, StorageBackend, init_config


@lru_cache(1)
def get_container() -> punq.Container:
    return _init_container()


class SupportsAsyncClose(t.Protocol):
    async def aclose(self): ...


cleanup_list: list[SupportsAsyncClose] = []


def register_for_cleanup(obj: SupportsAsyncClose):
    cleanup_list.append(obj)


def _init_storage(cfg: Config) -> KeyValueStorageI:
    if cfg.storage.backend == StorageBackend.REDIS:
        return RedisStorage.from_url(
            str(cfg.storage.redis_dsn), key_prefix=cfg.storage.key_prefix
        )
    return InMemoryStorage()


def _init_container() -> punq.Container:
    container = punq.Container()
    cfg = init_config()
    logger = setup_logger(cfg)
    storage = _init_storage(cfg)
    register_for_cleanup(storage)
    container.register(Config, instance=cfg)
    container.register(Logger, instance=logger)
    container.register(KeyValueStorageI, instance=storage)
    container.register(HTTPExceptionsMapper, HTTPExceptionsMapper)
    container.register(
        CartStore,
        CartStore,
        scope=punq.Scope.singleton,
        legacy_merge=cfg.cart.legacy_merge,
    )
    container.register(
        CartProvider,
        CartProvider,
        scope=punq.Scope.singleton,
        storage_key=cfg.cart.storage_key,
    )
    return container


def Resolve[T](dep: type[T] | str, **kwargs) -> T:
    return t.cast(T, get_container().resolve(dep, **kwargs))


def Inject[T](dep: type[T] | str, **kwargs):
    def resolver() -> T:
        return Resolve(dep, **kwargs)

    return Depends(resolver)
