from collections.abc import Iterable

from pydantic import ConfigDict, Field, TypeAdapter
from core.schemas import BaseDTO


class LineItemIn(BaseDTO):
    """Product descriptor as it comes from the catalog, without quantity"""

    model_config = ConfigDict(from_attributes=True, frozen=True, extra="ignore")

    id: str
    title: str
    image_url: str
    price: float


class LineItem(LineItemIn):
    quantity: int

    @classmethod
    def from_item(cls, item: LineItemIn, quantity: int) -> "LineItem":
        return cls(
            id=item.id,
            title=item.title,
            image_url=item.image_url,
            price=item.price,
            quantity=quantity,
        )

    @property
    def subtotal(self) -> float:
        return self.price * self.quantity


class CartSummary(BaseDTO):
    items_count: int = Field(ge=0)
    total_quantity: int = Field(ge=0)
    total_price: float


type Snapshot = tuple[LineItem, ...]

_snapshot_adapter = TypeAdapter(list[LineItem])


def dump_snapshot(snapshot: Iterable[LineItem]) -> str:
    return _snapshot_adapter.dump_json(list(snapshot)).decode()


def load_snapshot(raw: str | bytes) -> Snapshot:
    """Raises pydantic.ValidationError on malformed input"""
    return tuple(_snapshot_adapter.validate_json(raw))
