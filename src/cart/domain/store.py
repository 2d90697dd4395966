from collections.abc import Callable, Iterable
from logging import Logger

from cart.schemas import LineItem, LineItemIn, Snapshot

type SnapshotListener = Callable[[Snapshot], None]


class CartStore:
    """In-memory cart state.

    Every mutation builds a new snapshot tuple instead of changing the current one,
    so a snapshot handed out to a reader stays intact. Subscribers are notified
    only when the snapshot actually changed.

    With legacy_merge enabled, adding a product which is already in the cart
    resets quantity of every other item to 1. Existing clients rely on it,
    disable it to get a merge that only touches the matching item.
    """

    def __init__(self, logger: Logger, legacy_merge: bool = True):
        self._logger = logger
        self._legacy_merge = legacy_merge
        self._products: Snapshot = ()
        self._listeners: list[SnapshotListener] = []

    @property
    def products(self) -> Snapshot:
        return self._products

    @property
    def legacy_merge(self) -> bool:
        return self._legacy_merge

    @property
    def total_quantity(self) -> int:
        return sum(product.quantity for product in self._products)

    @property
    def total_price(self) -> float:
        return sum(product.subtotal for product in self._products)

    def __len__(self) -> int:
        return len(self._products)

    def __contains__(self, product_id: object) -> bool:
        return self.get(str(product_id)) is not None

    def get(self, product_id: str) -> LineItem | None:
        return next((p for p in self._products if p.id == product_id), None)

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def add_to_cart(self, item: LineItemIn) -> Snapshot:
        existing = self.get(item.id)
        if existing is None:
            return self._commit((*self._products, LineItem.from_item(item, 1)))
        products: list[LineItem] = []
        for product in self._products:
            if product.id == item.id:
                products.append(LineItem.from_item(item, existing.quantity + 1))
            elif self._legacy_merge:
                products.append(product.model_copy(update={"quantity": 1}))
            else:
                products.append(product)
        return self._commit(tuple(products))

    def increment(self, product_id: str) -> Snapshot:
        return self._commit(
            tuple(
                product.model_copy(update={"quantity": product.quantity + 1})
                if product.id == product_id
                else product
                for product in self._products
            )
        )

    def decrement(self, product_id: str) -> Snapshot:
        products = (
            product.model_copy(update={"quantity": product.quantity - 1})
            if product.id == product_id
            else product
            for product in self._products
        )
        return self._commit(tuple(p for p in products if p.quantity > 0))

    def replace(self, products: Iterable[LineItem]) -> Snapshot:
        """Replaces the whole cart, e.g. with a snapshot loaded from storage.
        Items with non-positive quantity are dropped and only the first item
        is kept for each id."""
        unique: dict[str, LineItem] = {}
        for product in products:
            if product.quantity <= 0:
                continue
            if product.id in unique:
                self._logger.warning("Dropping duplicated cart item: %s", product.id)
                continue
            unique[product.id] = product
        return self._commit(tuple(unique.values()))

    def _commit(self, products: Snapshot) -> Snapshot:
        if products == self._products:
            return self._products
        self._products = products
        self._logger.debug("Cart changed, %d items in cart", len(products))
        for listener in list(self._listeners):
            listener(products)
        return products
