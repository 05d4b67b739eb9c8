# backend/app/middleware/request_id.py
from __future__ import annotations

import re
import uuid
from contextvars import ContextVar
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from ..config import settings

# Caller-supplied ids are echoed into logs; keep them short and printable.
_SAFE_ID = re.compile(r"^[A-Za-z0-9._:-]{1,64}$")

_request_id: ContextVar[Optional[str]] = ContextVar("rehabpro_request_id", default=None)
_org_slug: ContextVar[Optional[str]] = ContextVar("rehabpro_org_slug", default=None)


def get_request_id() -> Optional[str]:
    return _request_id.get()


def get_org_slug() -> Optional[str]:
    return _org_slug.get()


def _incoming_id(request: Request) -> Optional[str]:
    raw = request.headers.get("X-Request-ID") or request.headers.get("X-Request-Id")
    if raw and _SAFE_ID.match(raw.strip()):
        return raw.strip()
    return None


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Tags each request with an id and the org slug it was made for.

    Both live in context vars so any log line written while the request is
    being served (router, service, calculator) carries them. A well-formed
    incoming X-Request-ID is reused; anything else gets a fresh UUID4.
    """

    header_out = "X-Request-ID"

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        rid = _incoming_id(request) or uuid.uuid4().hex
        org_slug = (request.headers.get(settings.dev_header_org_slug) or "").strip() or None

        request.state.request_id = rid
        rid_token = _request_id.set(rid)
        org_token = _org_slug.set(org_slug)
        try:
            resp = await call_next(request)
        finally:
            _org_slug.reset(org_token)
            _request_id.reset(rid_token)
        resp.headers[self.header_out] = rid
        return resp
