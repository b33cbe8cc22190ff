from starlette.datastructures import Headers
from starlette.middleware.gzip import GZipMiddleware
from starlette.types import Receive, Scope, Send


class SelectiveGZip(GZipMiddleware):
    """GZip compression that clients can opt out of with ``x-no-compression``."""

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and "x-no-compression" in Headers(scope=scope):
            await self.app(scope, receive, send)
            return

        await super().__call__(scope, receive, send)
