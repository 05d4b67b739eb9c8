# backend/app/routers/dashboard.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_principal
from ..db import get_db
from ..schemas import PortfolioOut
from ..services.rollups import org_portfolio

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/portfolio", response_model=PortfolioOut)
def dashboard_portfolio(db: Session = Depends(get_db), p=Depends(get_principal)):
    """
    Portfolio figures for the active org. Every project goes through the same
    calculator as /projects/{id}/economics, so card ROI/MAO match the deal page.
    """
    return org_portfolio(db, org_id=p.org_id).to_dict()
