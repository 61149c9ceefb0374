"""
Logging Middleware for Request/Response Logging

This middleware logs every HTTP request with:
- Request method and path
- Response status code
- Request processing time
- Client IP address
- Request id (taken from X-Request-ID or generated)

Server errors are logged at WARNING so they stand out from routine traffic.
"""

import logging
import time
import uuid

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

logger = logging.getLogger("shortener.access")

REQUEST_ID_HEADER = "X-Request-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for logging HTTP requests and responses.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        client_ip = self._get_client_ip(request)
        start_time = time.perf_counter()

        response = await call_next(request)

        process_time = time.perf_counter() - start_time
        level = logging.WARNING if response.status_code >= 500 else logging.INFO

        # Format: METHOD PATH STATUS_CODE PROCESS_TIME_MS CLIENT_IP REQUEST_ID
        logger.log(
            level,
            f"{request.method} {request.url.path} "
            f"{response.status_code} {process_time*1000:.2f}ms "
            f"IP:{client_ip} id:{request_id}"
        )

        response.headers["X-Process-Time"] = f"{process_time:.6f}"
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    def _get_client_ip(self, request: Request) -> str:
        """
        Extract client IP address, preferring the first X-Forwarded-For hop.
        """
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        return request.client.host if request.client else "unknown"


def add_logging_middleware(app: FastAPI) -> None:
    app.add_middleware(LoggingMiddleware)
