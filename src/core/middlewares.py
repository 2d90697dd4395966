from starlette.types import ASGIApp, Receive, Scope, Send

from cart.provider import CartProvider


class CartScopeMiddleware:
    """Binds the cart provider around every http request, so that handlers
    can reach the cart with use_cart()"""

    def __init__(self, app: ASGIApp, provider: CartProvider):
        self._app = app
        self._provider = provider

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self._provider.mounted:
            await self._app(scope, receive, send)
            return
        with self._provider.bind():
            await self._app(scope, receive, send)
