import hashlib
from collections import OrderedDict
from dataclasses import dataclass
from time import monotonic

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from nftgate.shared import Logger

logger = Logger(__name__).get_logger()

# Never replayed from the cache; CORS decides it per request
UNCACHED_HEADERS = {b"access-control-allow-origin"}


@dataclass(frozen=True)
class CachedResponse:
    body: bytes
    raw_headers: list[tuple[bytes, bytes]]
    stored_at: float


class ResponseCache(BaseHTTPMiddleware):
    """In-memory cache for successful GET responses.

    The key covers the method, the full path (including the signature segment),
    the query string and the body, so two signatures for the same token never
    share an entry. Only status 200 is stored. Oldest entries are evicted once
    either the entry count or the total body size goes over its bound.
    """

    def __init__(
        self,
        app,
        dispatch=None,
        ttl_s=86400,
        max_entries=256,
        max_entry_size=20971520,
        max_total_size=268435456,
    ):
        super().__init__(app, dispatch)

        # Params
        self.__ttl_s = ttl_s
        self.__max_entries = max_entries
        self.__max_entry_size = max_entry_size
        self.__max_total_size = max_total_size

        # Storage, oldest first
        self.__entries: OrderedDict[str, CachedResponse] = OrderedDict()
        self.__total_size = 0

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        if request.method != "GET" or self.__bypass(request):
            return await call_next(request)

        key = self.__key(request, await request.body())
        now = monotonic()

        cached = self.__lookup(key, now)
        if cached is not None:
            logger.debug("Cache hit for %s", request.url.path)
            return self.__replay(cached, "HIT")

        response = await call_next(request)
        if response.status_code != 200 or not self.__fits(response):
            return response

        body = b"".join([chunk async for chunk in response.body_iterator])
        entry = CachedResponse(
            body=body,
            raw_headers=[
                (name, value)
                for name, value in response.raw_headers
                if name.lower() not in UNCACHED_HEADERS
            ],
            stored_at=now,
        )
        self.__store(key, entry)
        return self.__replay(entry, "MISS")

    def __bypass(self, request: Request) -> bool:
        cache_control = request.headers.get("cache-control", "").lower()
        return "no-cache" in cache_control or "no-store" in cache_control

    def __key(self, request: Request, body: bytes) -> str:
        digest = hashlib.sha256()
        digest.update(request.method.encode())
        digest.update(b"\0" + request.url.path.encode())
        digest.update(b"\0" + request.url.query.encode())
        digest.update(b"\0" + body)
        return digest.hexdigest()

    def __fits(self, response: Response) -> bool:
        # Responses of unknown size are streamed through untouched
        content_length = response.headers.get("content-length")
        return content_length is not None and int(content_length) <= self.__max_entry_size

    def __lookup(self, key: str, now: float) -> CachedResponse | None:
        entry = self.__entries.get(key)
        if entry is None:
            return None

        if now - entry.stored_at > self.__ttl_s:
            self.__evict(key)
            return None

        return entry

    def __store(self, key: str, entry: CachedResponse):
        if key in self.__entries:
            self.__evict(key)
        self.__entries[key] = entry
        self.__total_size += len(entry.body)

        while (
            len(self.__entries) > self.__max_entries
            or self.__total_size > self.__max_total_size
        ):
            self.__evict(next(iter(self.__entries)))

    def __evict(self, key: str):
        entry = self.__entries.pop(key)
        self.__total_size -= len(entry.body)

    def __replay(self, entry: CachedResponse, status: str) -> Response:
        response = Response(content=entry.body, status_code=200)
        response.raw_headers = list(entry.raw_headers)
        response.headers["x-cache"] = status
        return response
