"""Fixed-window rate limiting backed by Redis.

One counter per caller per minute: key "ratelimit:{caller}:{minute}", where
caller is the token's account id, or the client IP for anonymous requests.
Over the limit the request is answered with RateLimitError (9001, HTTP 429)
and a Retry-After header. RATE_LIMIT_PER_MINUTE=0 disables the middleware.
"""

import time

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from config.settings import settings
from src.sm_common.errors import InvalidCredentialsError, RateLimitError
from src.sm_common.redis_client import get_redis
from src.sm_common.response import error_response
from src.sm_gateway.auth.jwt_handler import decode_access_token

_WINDOW_SECONDS = 60
_EXEMPT_PATHS = frozenset({"/health", "/docs", "/openapi.json"})


def _caller_key(request: Request) -> str:
    auth = request.headers.get("authorization", "")
    if auth.lower().startswith("bearer "):
        try:
            return f"acct:{decode_access_token(auth[7:].strip())}"
        except InvalidCredentialsError:
            pass  # the auth dependency rejects it later; count it by IP meanwhile
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return f"ip:{forwarded.split(',')[0].strip()}"
    return f"ip:{request.client.host if request.client else 'unknown'}"


class RateLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        limit = settings.RATE_LIMIT_PER_MINUTE
        if limit <= 0 or request.url.path in _EXEMPT_PATHS:
            return await call_next(request)

        window = int(time.time()) // _WINDOW_SECONDS
        key = f"ratelimit:{_caller_key(request)}:{window}"
        redis = await get_redis()
        count = await redis.incr(key)
        if count == 1:
            await redis.expire(key, _WINDOW_SECONDS)
        if count > limit:
            err = RateLimitError()
            retry_after = _WINDOW_SECONDS - int(time.time()) % _WINDOW_SECONDS
            return JSONResponse(
                status_code=err.http_status,
                content=error_response(err.code, err.message).model_dump(),
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)
