from fastapi import Request, Response
from fastapi.responses import PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from nftgate.shared import Logger

logger = Logger(__name__).get_logger()


class UnhandledErrors(BaseHTTPMiddleware):
    """Turns unexpected exceptions into a plain 500 inside the middleware stack.

    App level ``Exception`` handlers run in Starlette's outermost
    ``ServerErrorMiddleware``, so their replies skip CORS and browsers only see
    a network error. Installed innermost, this keeps the 500 visible to them.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.error("Failed to process request %s", request.url.path, exc_info=e)
            return PlainTextResponse("Internal server error", status_code=500)
