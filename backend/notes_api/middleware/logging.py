"""
Notes API — Request Logging Middleware
========================================

What:  One access log line for every note request.
How:   Times the downstream call, then logs method, path, status, duration,
       request ID, the note the request addressed and what kind of failure
       it ended in. The level follows the status class.
Who:   Applied to every request via Starlette middleware, inside
       RequestIDMiddleware so the request ID is already set.

What we log vs what we DON'T log:
    ✅ Log: method, path, status, duration, IP, request ID, note id, outcome
    ❌ Don't log: request bodies (note contents), headers

Example lines:
    GET /api/notes/3f2a... 404 1.8ms note=3f2a... outcome=note_not_found [a1b2c3d4]
    POST /api/notes 409 4.2ms note=- outcome=title_taken [e5f6a7b8]
"""

import logging
import time
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from notes_api.middleware.request_id import request_id_var

logger = logging.getLogger("notes_api.access")

# Probed by load balancers every few seconds; not worth an access line
HEALTH_PATHS = {"/health", "/api/healthchecker"}


def classify_outcome(status: int, note_id: Optional[str]) -> str:
    """Name what a response means for the note API."""
    if status == 404:
        return "note_not_found" if note_id else "no_route"
    if status == 409:
        return "title_taken"
    if status == 422:
        return "invalid_input"
    if status >= 500:
        return "store_error"
    return "ok"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs one line per request.

    Log levels:
        5xx → ERROR
        4xx → WARNING
        everything else → INFO
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in HEALTH_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000

        # Routing fills path_params into the shared scope during call_next
        note_id = request.path_params.get("note_id")
        note_id = str(note_id) if note_id is not None else None
        status = response.status_code
        outcome = classify_outcome(status, note_id)

        if status >= 500:
            level = logging.ERROR
        elif status >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO

        rid = request_id_var.get("")
        logger.log(
            level,
            "%s %s %d %.1fms note=%s outcome=%s [%s]",
            request.method,
            path,
            status,
            duration_ms,
            note_id or "-",
            outcome,
            rid,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "note_id": note_id,
                "outcome": outcome,
                "client_ip": request.client.host if request.client else "unknown",
            },
        )
        return response
