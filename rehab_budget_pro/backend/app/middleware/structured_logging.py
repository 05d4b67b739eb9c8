# backend/app/middleware/structured_logging.py
from __future__ import annotations

import logging
import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from ..config import settings

log = logging.getLogger("rehabpro.http")


def _route_template(request: Request) -> str:
    # "/api/projects/{project_id}/economics" groups better than the raw path
    path = request.url.path
    route = request.scope.get("route")
    template = getattr(route, "path", None)
    if not template:
        return path
    # routers mounted with a prefix may report the template without it
    prefix = settings.api_prefix.rstrip("/")
    if prefix and path.startswith(prefix + "/") and not template.startswith(prefix + "/"):
        return prefix + template
    return template


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """
    One `http_request` record per request. Fields go through `extra=` so the
    JSON formatter puts them next to request_id and org_slug.

    5xx responses log at ERROR, 4xx at WARNING, everything else at INFO.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            elapsed_ms = round((time.perf_counter() - started) * 1000, 1)
            if status_code >= 500:
                level = logging.ERROR
            elif status_code >= 400:
                level = logging.WARNING
            else:
                level = logging.INFO
            log.log(
                level,
                "http_request",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "route": _route_template(request),
                    "status_code": status_code,
                    "latency_ms": elapsed_ms,
                },
            )
