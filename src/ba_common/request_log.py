"""Request logging middleware for the read API.

Each request carries a request id: the caller's X-Request-ID header when it
sent a usable one, otherwise a fresh short id. The id is put on
request.state for the ApiResponse envelope and echoed back in the
X-Request-ID response header. Market reads are tagged with their market id
so one market's traffic can be picked out of the log.

Log format:
    INFO GET /api/v1/markets/ETH-USDC/phase market=ETH-USDC 200 (2ms) req_a1b2c3d4e5f6
"""

import logging
import re
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("ba.request")

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 64

_MARKET_IN_PATH = re.compile(r"/markets/([^/]+)")


def resolve_request_id(request: Request) -> str:
    inbound = request.headers.get(REQUEST_ID_HEADER, "").strip()
    if inbound and len(inbound) <= MAX_REQUEST_ID_LENGTH and inbound.isprintable():
        return inbound
    return f"req_{uuid.uuid4().hex[:12]}"


def market_of(path: str) -> str:
    match = _MARKET_IN_PATH.search(path)
    return match.group(1) if match else "-"


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = resolve_request_id(request)
        request.state.request_id = request_id

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        response.headers[REQUEST_ID_HEADER] = request_id

        level = logging.ERROR if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "%s %s market=%s %d (%.0fms) %s",
            request.method,
            request.url.path,
            market_of(request.url.path),
            response.status_code,
            elapsed_ms,
            request_id,
        )
        return response
