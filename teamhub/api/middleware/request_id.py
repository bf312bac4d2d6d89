"""
Request ID middleware for request correlation.

Cascade log lines carry both the request ID and the cascade name, so one
request can be followed through every transaction attempt it triggered.
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from teamhub.logging_config import get_logger, request_id_var

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
SLOW_REQUEST_MS = 1000


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    Assign a request ID to each request.

    An incoming X-Request-ID is reused; otherwise a new UUID is generated.
    The ID is echoed on the response and set on the logging context.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        token = request_id_var.set(request_id)

        try:
            start = time.perf_counter()
            response = await call_next(request)
            duration_ms = round((time.perf_counter() - start) * 1000, 1)
            response.headers[REQUEST_ID_HEADER] = request_id

            log = logger.warning if duration_ms > SLOW_REQUEST_MS else logger.debug
            log(
                "%s %s -> %d",
                request.method,
                request.url.path,
                response.status_code,
                extra={"duration_ms": duration_ms},
            )
            return response
        finally:
            request_id_var.reset(token)
