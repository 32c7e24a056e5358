from __future__ import annotations

import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from vapecave.core.context import get_request_id, reset_request_id, set_request_id

logger = logging.getLogger("vapecave.request")

# Load balancer probes hit this every few seconds.
QUIET_PATHS = frozenset({"/health"})


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id, logs its outcome and echoes the id back in `X-Request-ID`."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Response]) -> Response:
        token = set_request_id(request.headers.get("x-request-id"))
        request_id = get_request_id()
        request.state.request_id = request_id
        level = logging.DEBUG if request.url.path in QUIET_PATHS else logging.INFO

        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            logger.log(
                level,
                "request.end",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "status_code": status_code,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )
            reset_request_id(token)

        response.headers["X-Request-ID"] = request_id or ""
        return response
