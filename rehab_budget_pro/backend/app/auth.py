# backend/app/auth.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from fastapi import Depends, HTTPException, Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from .config import settings
from .db import get_db
from .models import AppUser, Organization, OrgMembership

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    org_id: int
    org_slug: str
    user_id: int
    email: str
    role: str  # owner | operator | analyst


ROLE_ORDER = {"analyst": 1, "operator": 2, "owner": 3}


def _require_role(principal: Principal, min_role: str) -> None:
    if ROLE_ORDER.get(principal.role, 0) < ROLE_ORDER.get(min_role, 999):
        raise HTTPException(status_code=403, detail=f"Requires role >= {min_role}")


def _provision_org(db: Session, org_slug: str) -> Organization | None:
    org = db.scalar(select(Organization).where(Organization.slug == org_slug))
    if org is None and settings.dev_auto_provision:
        org = Organization(slug=org_slug, name=org_slug, created_at=datetime.utcnow())
        db.add(org)
        db.commit()
        db.refresh(org)
        log.info("provisioned org", extra={"org_id": int(org.id)})
    return org


def _provision_user(db: Session, email: str) -> AppUser | None:
    user = db.scalar(select(AppUser).where(AppUser.email == email))
    if user is None and settings.dev_auto_provision:
        user = AppUser(email=email, display_name=email.split("@")[0], created_at=datetime.utcnow())
        db.add(user)
        db.commit()
        db.refresh(user)
    return user


def get_principal(request: Request, db: Session = Depends(get_db)) -> Principal:
    """
    Org context from dev headers:
      X-Org-Slug    (required; active org)
      X-User-Email  (required)
      X-User-Role   (owner|operator|analyst; used only when a membership is first created)

    Unknown orgs/users are created on first sight when dev_auto_provision is on.
    """
    org_slug = (request.headers.get(settings.dev_header_org_slug) or "").strip()
    if not org_slug:
        raise HTTPException(status_code=401, detail="Missing X-Org-Slug (active org context).")

    email = (request.headers.get(settings.dev_header_user_email) or "").strip().lower()
    if not email:
        raise HTTPException(status_code=401, detail="Missing X-User-Email")
    role_hint = (request.headers.get(settings.dev_header_user_role) or "owner").strip().lower()

    org = _provision_org(db, org_slug)
    user = _provision_user(db, email)
    if org is None or user is None:
        raise HTTPException(status_code=401, detail="Unknown org or user")

    mem = db.scalar(
        select(OrgMembership).where(OrgMembership.org_id == int(org.id), OrgMembership.user_id == int(user.id))
    )
    if mem is None and settings.dev_auto_provision:
        mem = OrgMembership(
            org_id=int(org.id),
            user_id=int(user.id),
            role=role_hint if role_hint in ROLE_ORDER else "owner",
            created_at=datetime.utcnow(),
        )
        db.add(mem)
        db.commit()
    if mem is None:
        raise HTTPException(status_code=403, detail="Not a member of this org")

    return Principal(
        org_id=int(org.id),
        org_slug=str(org.slug),
        user_id=int(user.id),
        email=str(user.email),
        role=str(mem.role),
    )


def require_operator(p: Principal = Depends(get_principal)) -> Principal:
    _require_role(p, "operator")
    return p


def require_owner(p: Principal = Depends(get_principal)) -> Principal:
    _require_role(p, "owner")
    return p
