# backend/app/routers/journal.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func, or_, desc
from sqlalchemy.orm import Session

from ..auth import get_principal, require_operator
from ..db import get_db
from ..domain.errors import reject_nulls
from ..models import JournalPage
from ..schemas import JournalPageCreate, JournalPageOut, JournalPageUpdate
from ..services.events_facade import feed, snapshot
from ..services.ownership import must_get_journal_page, must_get_project

router = APIRouter(prefix="/journal", tags=["journal"])


def _record(db: Session, p, row: JournalPage, action: str, before=None, after=None) -> None:
    feed.record(
        db,
        org_id=p.org_id,
        actor_user_id=p.user_id,
        entity_type="journal_page",
        entity_id=row.id,
        action=action,
        project_id=row.project_id,
        before=before,
        after=after,
    )


@router.post("", response_model=JournalPageOut)
def create_journal_page(payload: JournalPageCreate, db: Session = Depends(get_db), p=Depends(require_operator)):
    if payload.project_id is not None:
        must_get_project(db, org_id=p.org_id, project_id=payload.project_id)

    row = JournalPage(org_id=p.org_id, **payload.model_dump(exclude_none=True))
    db.add(row)
    db.flush()

    _record(db, p, row, "insert", after=snapshot(row))
    db.commit()
    db.refresh(row)
    return row


@router.get("", response_model=list[JournalPageOut])
def list_journal_pages(
    project_id: int | None = Query(default=None),
    page_type: str | None = Query(default=None),
    pinned: bool | None = Query(default=None),
    archived: bool = Query(default=False),
    search: str | None = Query(default=None),
    db: Session = Depends(get_db),
    p=Depends(get_principal),
):
    q = select(JournalPage).where(JournalPage.org_id == p.org_id, JournalPage.is_archived.is_(archived))
    if project_id is not None:
        q = q.where(JournalPage.project_id == project_id)
    if page_type:
        q = q.where(JournalPage.page_type == page_type)
    if pinned is not None:
        q = q.where(JournalPage.is_pinned.is_(pinned))
    if search:
        like = f"%{search.strip().lower()}%"
        q = q.where(
            or_(
                func.lower(JournalPage.title).like(like),
                func.lower(func.coalesce(JournalPage.content, "")).like(like),
            )
        )
    # pinned first, then most recently edited
    return db.scalars(q.order_by(desc(JournalPage.is_pinned), desc(JournalPage.updated_at), desc(JournalPage.id))).all()


@router.get("/{page_id}", response_model=JournalPageOut)
def get_journal_page(page_id: int, db: Session = Depends(get_db), p=Depends(get_principal)):
    return must_get_journal_page(db, org_id=p.org_id, page_id=page_id)


@router.patch("/{page_id}", response_model=JournalPageOut)
def update_journal_page(
    page_id: int,
    payload: JournalPageUpdate,
    db: Session = Depends(get_db),
    p=Depends(require_operator),
):
    row = must_get_journal_page(db, org_id=p.org_id, page_id=page_id)
    before = snapshot(row)

    changes = payload.model_dump(exclude_unset=True)
    reject_nulls(changes, ("title", "page_type", "is_pinned", "is_archived"))
    if changes.get("project_id") is not None:
        must_get_project(db, org_id=p.org_id, project_id=changes["project_id"])
    for k, v in changes.items():
        setattr(row, k, v)
    db.flush()

    _record(db, p, row, "update", before=before, after=snapshot(row))
    db.commit()
    db.refresh(row)
    return row


@router.delete("/{page_id}", response_model=dict)
def delete_journal_page(page_id: int, db: Session = Depends(get_db), p=Depends(require_operator)):
    row = must_get_journal_page(db, org_id=p.org_id, page_id=page_id)
    before = snapshot(row)

    db.delete(row)
    db.flush()

    _record(db, p, row, "delete", before=before)
    db.commit()
    return {"ok": True, "id": page_id}
