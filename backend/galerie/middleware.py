"""
Request correlation and access logging.

Every request gets an ``X-Request-ID`` (taken from the client header or
generated) which is echoed on the response and attached to the access log
lines.
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from galerie.core.logging_config import get_logger


logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Assign a request ID and log one line per completed or failed request.

    Example:
        app.add_middleware(RequestLoggingMiddleware)

    Log output (JSON):
        {
            "level": "INFO",
            "message": "Request completed",
            "method": "GET",
            "path": "/health",
            "status_code": 200,
            "latency_ms": 1.8,
            "request_id": "0b6f..."
        }
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        context = {
            "method": request.method,
            "path": request.url.path,
            "request_id": request_id,
        }
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                f"Request failed: {exc}",
                extra={
                    **context,
                    "latency_ms": round((time.perf_counter() - start_time) * 1000, 2),
                    "exception_type": type(exc).__name__,
                },
                exc_info=True,
            )
            raise

        logger.info(
            "Request completed",
            extra={
                **context,
                "status_code": response.status_code,
                "latency_ms": round((time.perf_counter() - start_time) * 1000, 2),
            },
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
