# backend/app/main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .db import init_db
from .domain.errors import DomainValidationError, InvalidTransition
from .logging_config import configure_logging

from .middleware.request_id import RequestIDMiddleware
from .middleware.structured_logging import StructuredLoggingMiddleware

from .routers.meta import router as meta_router
from .routers.dashboard import router as dashboard_router
from .routers.changes import router as changes_router

from .routers.projects import router as projects_router
from .routers.budget_items import router as budget_items_router
from .routers.vendors import router as vendors_router
from .routers.draws import router as draws_router
from .routers.cost_reference import router as cost_reference_router
from .routers.templates import router as templates_router
from .routers.vendor_tags import router as vendor_tags_router
from .routers.vendor_contacts import router as vendor_contacts_router
from .routers.journal import router as journal_router

API_PREFIX = settings.api_prefix

log = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    val = getattr(settings, "cors_allow_origins", ["*"])
    if isinstance(val, str):
        v = val.strip()
        return ["*"] if v == "*" else [x.strip() for x in v.split(",") if x.strip()]
    if isinstance(val, list) and val:
        return val
    return ["*"]


@asynccontextmanager
async def _lifespan(app: FastAPI):
    if settings.auto_create_tables:
        init_db()
    yield


async def _invalid_transition(request: Request, exc: InvalidTransition) -> JSONResponse:
    log.warning(
        "rejected %s transition %s -> %s",
        exc.entity,
        exc.from_status,
        exc.to_status,
        extra={"path": request.url.path},
    )
    return JSONResponse(
        status_code=409,
        content={"detail": str(exc), "from": exc.from_status, "to": exc.to_status},
    )


async def _domain_validation(request: Request, exc: DomainValidationError) -> JSONResponse:
    log.info("domain validation failed: %s", exc, extra={"path": request.url.path})
    return JSONResponse(status_code=422, content={"detail": str(exc)})


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title="Rehab Budget Pro",
        version=settings.engine_version,
        lifespan=_lifespan,
    )

    # Starlette runs the last-added middleware first: request id wraps logging
    app.add_middleware(StructuredLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(InvalidTransition, _invalid_transition)
    app.add_exception_handler(DomainValidationError, _domain_validation)

    # Core
    app.include_router(meta_router, prefix=API_PREFIX)
    app.include_router(dashboard_router, prefix=API_PREFIX)
    app.include_router(changes_router, prefix=API_PREFIX)

    # Budgeting
    app.include_router(projects_router, prefix=API_PREFIX)
    app.include_router(budget_items_router, prefix=API_PREFIX)
    app.include_router(vendors_router, prefix=API_PREFIX)
    app.include_router(draws_router, prefix=API_PREFIX)
    app.include_router(cost_reference_router, prefix=API_PREFIX)
    app.include_router(templates_router, prefix=API_PREFIX)
    app.include_router(vendor_tags_router, prefix=API_PREFIX)
    app.include_router(vendor_contacts_router, prefix=API_PREFIX)

    # Notes
    app.include_router(journal_router, prefix=API_PREFIX)

    return app


app = create_app()
