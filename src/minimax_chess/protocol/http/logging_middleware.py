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
RESPONSE_TIME_HEADER = "x-response-time-ms"

_GAME_PATH = re.compile(r"^/api/games/([^/]+)")


def game_id_from_path(path: str) -> Optional[str]:
    """Return the game id addressed by an ``/api/games/{id}/...`` path, if any."""
    m = _GAME_PATH.match(path)
    return m.group(1) if m else None


class RequestIDLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and log one line per request and response.

    An incoming ``x-request-id`` is reused so a client can correlate its own
    logs; otherwise a fresh uuid4 is issued. Lines for session routes carry
    the game id. Responses log at WARNING for 4xx and ERROR for 5xx, and
    report their handling time in ``x-response-time-ms``.
    """

    async def dispatch(self, request: Request, call_next: Callable):
        start = time.perf_counter()
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        game_id = game_id_from_path(request.url.path)
        extra = {"request_id": request_id, "game_id": game_id}

        logger.debug(
            "-> %s %s rid=%s game=%s",
            request.method,
            request.url.path,
            request_id,
            game_id or "-",
            extra=extra,
        )

        response = await call_next(request)
        duration_ms = int((time.perf_counter() - start) * 1000)
        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers[RESPONSE_TIME_HEADER] = str(duration_ms)

        if response.status_code >= 500:
            level = logging.ERROR
        elif response.status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO
        logger.log(
            level,
            "<- %s %s %d %dms rid=%s game=%s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            request_id,
            game_id or "-",
            extra=extra,
        )
        return response
