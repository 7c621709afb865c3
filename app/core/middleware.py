import logging
import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("app.request")


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    Tags every request with a request id (taken from the incoming header when
    present), echoes it on the response and logs one access line per request.
    """

    def __init__(self, app, header_name: str = "X-Request-Id"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        rid = request.headers.get(self.header_name) or str(uuid.uuid4())
        request.state.request_id = rid
        started = time.perf_counter()

        response = await call_next(request)
        response.headers[self.header_name] = rid

        principal = getattr(request.state, "principal", None)
        logger.info(
            "%s %s -> %s",
            request.method,
            request.url.path,
            response.status_code,
            extra={
                "request_id": rid,
                "profile_id": principal.profile_id if principal else None,
                "duration_ms": round((time.perf_counter() - started) * 1000, 1),
            },
        )
        return response
