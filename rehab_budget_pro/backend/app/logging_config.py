# backend/app/logging_config.py
from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from .config import settings
from .middleware.request_id import get_org_slug, get_request_id

# Attributes callers may pass via `extra=`; anything else on the record is ignored.
EXTRA_KEYS = (
    "org_id",
    "user_id",
    "project_id",
    "entity_type",
    "entity_id",
    "action",
    "method",
    "path",
    "route",
    "status_code",
    "latency_ms",
)


_HANDLER_NAME = "rehabpro"


class JsonFormatter(logging.Formatter):
    """One JSON object per line, tagged with the current request id and org."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        rid = get_request_id()
        if rid:
            payload["request_id"] = rid
        org = get_org_slug()
        if org:
            payload["org_slug"] = org

        for k in EXTRA_KEYS:
            v = getattr(record, k, None)
            if v is not None:
                payload[k] = v

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging() -> None:
    level = settings.log_level.upper()

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    if settings.log_json:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))

    # create_app() runs again on uvicorn reload and in tests; swap only our own handler
    root = logging.getLogger()
    for h in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(h)
    root.addHandler(handler)
    root.setLevel(level)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(settings.sql_log_level.upper())
