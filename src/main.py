import asyncio
from logging import Logger

from cart.domain.interfaces import KeyValueStorageI
from cart.provider import CartProvider
from core.exception_mappers import HTTPExceptionsMapper
from core.ioc import Resolve, cleanup_list
from core.middlewares import CartScopeMiddleware
from gateways.exceptions import StorageError
from config import Config
import uvicorn
from core.router import router
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = Resolve(Logger)
    storage = Resolve(KeyValueStorageI)
    provider: CartProvider = app.state.cart_provider
    logger.info("Pinging storage...")
    try:
        await asyncio.wait_for(storage.ping(), timeout=3)
    except (StorageError, TimeoutError) as e:
        logger.warning("Storage is unreachable, cart may start empty: %r", e)
    try:
        await provider.start()
        logger.info(
            "Cart is ready, %d items in cart (legacy merge: %s)",
            provider.cart.items_count,
            provider.store.legacy_merge,
        )
        yield
    finally:
        await provider.aclose()
        await asyncio.gather(*[obj.aclose() for obj in cleanup_list])


def app_factory() -> FastAPI:
    cfg = Resolve(Config)
    app = FastAPI(title="Cartstore API", version=cfg.api_version, lifespan=lifespan)
    app.state.cart_provider = Resolve(CartProvider)
    app.include_router(router)
    Resolve(HTTPExceptionsMapper, app=app).setup_handlers()
    app.add_middleware(CartScopeMiddleware, provider=app.state.cart_provider)
    if cfg.server.allow_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cfg.server.allow_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    return app


async def main() -> None:
    cfg = Resolve(Config)
    logger = Resolve(Logger)
    logger.info(f"Running server in {cfg.mode} mode")
    uvicorn_conf = uvicorn.Config(
        app="main:app_factory",
        factory=True,
        host=cfg.server.host,
        port=int(cfg.server.port),
    )
    server = uvicorn.Server(uvicorn_conf)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        ...
