"""Request logging middleware.

Logs every HTTP request with method, path, status code, latency, the short
request ID and, once authenticated, the calling account. The request_id is
injected into request.state so handlers can echo it in ApiResponse.

Log format:
    INFO [POST] /api/v1/orders/7/withdraw → 200 (4ms) req_a1b2c3d4e5f6 acct=provider-1
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("sm.request")


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.request_id = f"req_{uuid.uuid4().hex[:12]}"

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        logger.info(
            "[%s] %s → %d (%.0fms) %s acct=%s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request.state.request_id,
            getattr(request.state, "account_id", "-"),
        )
        return response
