from logging import Logger
from unittest.mock import create_autospec

import pytest
from contextlib import nullcontext as does_not_raise

from cart.schemas import LineItem, LineItemIn


def exc_to_ctx_manager(exc: type[Exception] | None):
    return pytest.raises(exc) if exc else does_not_raise()


def logger_mock():
    return create_autospec(Logger, instance=True)


def make_item(id: str, price: float = 10, **kwargs) -> LineItemIn:
    return LineItemIn(
        id=id,
        title=kwargs.get("title", f"Product {id}"),
        image_url=kwargs.get("image_url", f"https://cdn.example.com/{id}.png"),
        price=price,
    )


def make_line_item(id: str, quantity: int, price: float = 10) -> LineItem:
    return LineItem.from_item(make_item(id, price), quantity)
