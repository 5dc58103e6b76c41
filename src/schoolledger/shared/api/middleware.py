"""
Correlation ID Middleware
Binds a request id onto the logging context and times each request
"""
from __future__ import annotations

import time
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from schoolledger.shared.logging import bind_context, clear_context, get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        correlation_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        bind_context(trace_id=correlation_id, method=request.method, path=request.url.path)
        start_time = time.perf_counter()
        try:
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info("request_completed", status_code=response.status_code, duration_ms=round(duration_ms, 2))
            response.headers[REQUEST_ID_HEADER] = correlation_id
            return response
        except Exception as exc:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error("request_failed", error=str(exc), duration_ms=round(duration_ms, 2))
            raise
        finally:
            clear_context()
