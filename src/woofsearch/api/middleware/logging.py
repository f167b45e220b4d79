"""Logging middleware for request/response tracking.

This middleware logs every HTTP request and its response with a request ID
and timing, so a slow or failing search can be traced through the logs.
"""

import logging
import time
import uuid
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("woofsearch.api")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log HTTP requests and responses.

    This middleware:
    1. Assigns a unique request ID to each request
    2. Logs request details (method, path, client, user)
    3. Measures request duration
    4. Logs the response status at a level matching its severity
    """

    def __init__(self, app, enabled: bool = True):
        """Initialize the logging middleware.

        Args:
            app: The FastAPI application
            enabled: Whether logging is enabled (default: True)
        """
        super().__init__(app)
        self.enabled = enabled

    async def dispatch(self, request: Request, call_next: Callable):
        """Process the request and log details.

        Args:
            request: The incoming request
            call_next: The next middleware/handler in the chain

        Returns:
            The response from the next handler
        """
        if not self.enabled:
            return await call_next(request)

        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        client_ip = self._get_client_ip(request)
        user = getattr(request.state, "user", None)
        user_id = user.get("sub") if user else None

        start_time = time.perf_counter()

        logger.info(
            f"Request started: {request.method} {request.url.path}",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "query_params": str(request.query_params),
                "client_ip": client_ip,
                "user_id": user_id,
            },
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = int((time.perf_counter() - start_time) * 1000)
            logger.error(
                f"Request failed: {request.method} {request.url.path}: {e}",
                extra={
                    "request_id": request_id,
                    "duration_ms": duration_ms,
                    "error_type": type(e).__name__,
                },
                exc_info=True,
            )
            raise

        duration_ms = int((time.perf_counter() - start_time) * 1000)
        response.headers["X-Request-ID"] = request_id

        log_level = logging.INFO
        if response.status_code >= 500:
            log_level = logging.ERROR
        elif response.status_code >= 400:
            log_level = logging.WARNING

        logger.log(
            log_level,
            f"Request completed: {request.method} {request.url.path} "
            f"{response.status_code} in {duration_ms}ms",
            extra={
                "request_id": request_id,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
                "user_id": user_id,
            },
        )

        return response

    def _get_client_ip(self, request: Request) -> str:
        """Get client IP address, honouring proxy headers.

        Args:
            request: The FastAPI request

        Returns:
            Client IP address
        """
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

        return request.client.host if request.client else "unknown"


def configure_logging(log_level: str = "INFO") -> None:
    """Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Raises:
        ValueError: If the level name is unknown
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")

    logging.basicConfig(level=level, format=LOG_FORMAT)
