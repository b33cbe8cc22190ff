from fastapi import Request, Response
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from nftgate.shared import Logger

logger = Logger(__name__).get_logger()


class HTTPSRedirect(BaseHTTPMiddleware):
    """Sends plain HTTP requests to the HTTPS listener.

    The port in the Host header is swapped from ``http_port`` to ``https_port``
    so a service on non-standard ports redirects to the right listener.
    """

    def __init__(self, app, dispatch=None, http_port=80, https_port=443):
        super().__init__(app, dispatch)
        self.__http_port = http_port
        self.__https_port = https_port

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        if request.url.scheme != "http":
            return await call_next(request)

        target = request.url.replace(scheme="https", netloc=self.__netloc(request))
        logger.debug("Redirecting %s to %s", request.url.path, target.netloc)
        return RedirectResponse(str(target), status_code=307)

    def __netloc(self, request: Request) -> str:
        host = request.headers.get("host") or request.url.netloc
        hostname, _, port = host.rpartition(":")
        # No port given, or the colon belongs to an IPv6 literal
        if not hostname or "]" in port:
            hostname, port = host, ""

        if port and port != str(self.__http_port):
            return host
        if self.__https_port == 443:
            return hostname
        return f"{hostname}:{self.__https_port}"
