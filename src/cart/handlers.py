from collections.abc import Sequence
import typing as t
from fastapi import APIRouter, Depends
from cart.provider import CartContext, use_cart
from cart.schemas import CartSummary, LineItem, LineItemIn

router = APIRouter(prefix="/cart", tags=["cart"])


async def get_cart() -> CartContext:
    return use_cart()


CartDep = t.Annotated[CartContext, Depends(get_cart)]


@router.get("/")
async def list_products_in_cart(cart: CartDep) -> Sequence[LineItem]:
    return cart.products


@router.get("/summary")
async def cart_summary(cart: CartDep) -> CartSummary:
    return CartSummary(
        items_count=cart.items_count,
        total_quantity=cart.total_quantity,
        total_price=cart.total_price,
    )


@router.post("/add")
async def add_to_cart(item: LineItemIn, cart: CartDep) -> Sequence[LineItem]:
    return cart.add_to_cart(item)


@router.post("/increment/{product_id}")
async def increment_product_qty(product_id: str, cart: CartDep) -> Sequence[LineItem]:
    return cart.increment(product_id)


@router.post("/decrement/{product_id}")
async def decrement_product_qty(product_id: str, cart: CartDep) -> Sequence[LineItem]:
    return cart.decrement(product_id)
