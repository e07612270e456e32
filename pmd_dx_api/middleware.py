"""Request pipeline stages wrapped around every route.

Order, outermost first: access logging, response caching, then the route
itself (which receives its parsed parameters through a RequestContext
dependency).
"""
import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from pmd_dx_api.clients.cache_client import CachedResponse, CacheMissError, ResponseCache
from pmd_dx_api.errors import INTERNAL_ERROR_MESSAGE
from pmd_dx_api.logger import log_error, log_request

logger = logging.getLogger(__name__)


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Writes one access log line per request, failed requests included."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            response = await call_next(request)
        except Exception:
            # Turned into the generic 500 by the outermost error handler
            log_request(request, 500, len(INTERNAL_ERROR_MESSAGE))
            raise
        log_request(request, response.status_code, int(response.headers.get("content-length", 0)))
        return response


def cache_key(request: Request) -> str:
    """Scheme-relative request URL including the query string."""
    url = request.url
    key = f"//{url.netloc}{url.path}"
    if url.query:
        key += f"?{url.query}"
    return key


def _encode_headers(headers: list[tuple[bytes, bytes]]) -> dict[str, list[str]]:
    encoded: dict[str, list[str]] = {}
    for name, value in headers:
        encoded.setdefault(name.decode("latin-1"), []).append(value.decode("latin-1"))
    return encoded


def _replay(cached: CachedResponse) -> Response:
    response = Response(content=cached.body, status_code=200)
    response.raw_headers = [
        (name.encode("latin-1"), value.encode("latin-1"))
        for name, values in cached.headers.items()
        for value in values
    ]
    return response


class ResponseCacheMiddleware(BaseHTTPMiddleware):
    """Answers from the cache when possible, otherwise records and stores.

    Only responses with status 200 are stored. Cache failures never reach the
    client: a failed lookup falls through to the route, a failed store is
    logged after the response has been produced. There is no per-key locking,
    concurrent misses on one URL all run the route and the last write wins.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        cache: ResponseCache | None = getattr(request.app.state, "response_cache", None)
        if cache is None or request.method != "GET":
            return await call_next(request)

        key = cache_key(request)
        try:
            cached = await cache.get_response(key)
        except CacheMissError:
            logger.debug("Cache miss for: %s", key)
        except Exception as e:
            # Degrade to an uncached request
            log_error(e)
        else:
            logger.debug("Cache hit for: %s", key)
            return _replay(cached)

        response = await call_next(request)
        body = b"".join([chunk async for chunk in response.body_iterator])
        recorded = Response(content=body, status_code=response.status_code)
        recorded.raw_headers = response.raw_headers

        if response.status_code == 200:
            try:
                await cache.store_response(key, _encode_headers(response.raw_headers), body)
            except Exception as e:
                log_error(e)
        return recorded
