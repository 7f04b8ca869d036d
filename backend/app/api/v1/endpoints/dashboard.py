from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.api.deps import get_actor, get_db
from backend.app.schemas.dashboard import DashboardSummary
from backend.services import dashboard
from backend.services.auth import Actor

router = APIRouter(prefix="/dashboard")


@router.get("/summary", response_model=DashboardSummary)
def get_summary(db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    return dashboard.summary(db)
