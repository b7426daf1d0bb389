from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.services.stats_service import StatsService
from app.schemas.stats import DashboardResponse

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("", response_model=DashboardResponse)
def get_dashboard(mediaAsset: Optional[str] = Query(None), db: Session = Depends(get_db)):
    """
    Stats plus today's follow-ups, overdue follow-ups and the active
    sponsorships with their contract progress.
    """
    return StatsService(db).get_dashboard(media_asset=mediaAsset)
