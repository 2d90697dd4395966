from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from logging import Logger

from cart.domain.interfaces import KeyValueStorageI
from cart.domain.store import CartStore
from cart.persistence import DEFAULT_STORAGE_KEY, PersistenceSynchronizer, SyncState
from cart.schemas import LineItemIn, Snapshot
from core.services.exceptions import ProviderScopeError


@dataclass(frozen=True, slots=True)
class CartContext:
    """What cart consumers get: current products, totals and the three mutations"""

    _store: CartStore

    @property
    def products(self) -> Snapshot:
        return self._store.products

    @property
    def items_count(self) -> int:
        return len(self._store)

    @property
    def total_quantity(self) -> int:
        return self._store.total_quantity

    @property
    def total_price(self) -> float:
        return self._store.total_price

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._store

    def add_to_cart(self, item: LineItemIn) -> Snapshot:
        return self._store.add_to_cart(item)

    def increment(self, product_id: str) -> Snapshot:
        return self._store.increment(product_id)

    def decrement(self, product_id: str) -> Snapshot:
        return self._store.decrement(product_id)


_current_cart: ContextVar[CartContext | None] = ContextVar("current_cart", default=None)


class CartProvider:
    """Owns the cart store and its persistence.

    Constructed once at application start. The cart becomes reachable through
    use_cart() only inside bind(), and only after start() has loaded the
    persisted snapshot.
    """

    def __init__(
        self,
        store: CartStore,
        storage: KeyValueStorageI,
        logger: Logger,
        storage_key: str = DEFAULT_STORAGE_KEY,
    ):
        self._store = store
        self._logger = logger
        self.synchronizer = PersistenceSynchronizer(store, storage, logger, storage_key)
        self._cart = CartContext(store)

    @property
    def store(self) -> CartStore:
        return self._store

    @property
    def cart(self) -> CartContext:
        return self._cart

    @property
    def mounted(self) -> bool:
        return self.synchronizer.state == SyncState.READY

    async def start(self) -> None:
        await self.synchronizer.start()

    async def aclose(self) -> None:
        await self.synchronizer.aclose()

    @contextmanager
    def bind(self) -> Iterator[CartContext]:
        if not self.mounted:
            raise ProviderScopeError("CartProvider must be started before use")
        token = _current_cart.set(self._cart)
        try:
            yield self._cart
        finally:
            _current_cart.reset(token)

    @asynccontextmanager
    async def mount(self) -> AsyncIterator[CartContext]:
        await self.start()
        try:
            with self.bind() as cart:
                yield cart
        finally:
            await self.aclose()


def use_cart() -> CartContext:
    cart = _current_cart.get()
    if cart is None:
        raise ProviderScopeError()
    return cart
