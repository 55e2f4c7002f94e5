import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"


class HTTPLogMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id and logs its outcome.

    The id is taken from ``X-Request-ID`` when the caller sends one and is
    echoed back on the response, so a page-data fetch can be matched with
    the API log line it produced. Server errors are logged at WARNING; the
    rest at DEBUG.
    """

    def __init__(self, app, logger_name: str = "devevent.http"):
        super().__init__(app)
        self._logger = logging.getLogger(logger_name)

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        start = time.monotonic()
        method = request.method
        path = request.url.path
        self._logger.debug(
            "http.request start id=%s method=%s path=%s bytes=%s",
            request_id, method, path, request.headers.get("content-length", "-"),
        )
        try:
            response: Response = await call_next(request)
        except Exception as e:
            self._logger.warning(
                "http.request error id=%s method=%s path=%s dur_ms=%d err=%r",
                request_id, method, path, (time.monotonic() - start) * 1000, e,
            )
            raise

        dur_ms = (time.monotonic() - start) * 1000
        level = logging.WARNING if response.status_code >= 500 else logging.DEBUG
        self._logger.log(
            level,
            "http.request end id=%s method=%s path=%s status=%s dur_ms=%d",
            request_id, method, path, response.status_code, dur_ms,
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
