from __future__ import annotations

import logging
import re
import time
import uuid
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request


logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "x-request-id"

_CLIENT_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")
_GAME_PATH = re.compile(r"^/api/games/([^/]+)")


def request_id_for(request: Request) -> str:
    """Reuse a well-formed client ``x-request-id``, otherwise mint a new one."""
    supplied = request.headers.get(REQUEST_ID_HEADER)
    if supplied and _CLIENT_REQUEST_ID.match(supplied):
        return supplied
    return str(uuid.uuid4())


def game_id_for(path: str) -> Optional[str]:
    match = _GAME_PATH.match(path)
    return match.group(1) if match else None


class RequestIDLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an ID and log one line when it completes.

    The line carries method, path, status, duration and, for session routes,
    the ``game_id``. Server errors are logged at WARNING.
    """

    async def dispatch(self, request: Request, call_next: Callable):
        started = time.perf_counter()
        request_id = request_id_for(request)
        request.state.request_id = request_id
        fields = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "game_id": game_id_for(request.url.path),
        }

        try:
            response = await call_next(request)
        except Exception:
            logger.exception("request failed", extra=fields)
            raise

        response.headers[REQUEST_ID_HEADER] = request_id
        fields["status_code"] = response.status_code
        fields["duration_ms"] = int((time.perf_counter() - started) * 1000)
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(level, "%s %s -> %d", request.method, request.url.path, response.status_code, extra=fields)
        return response
