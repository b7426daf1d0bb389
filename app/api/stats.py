from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.services.stats_service import StatsService
from app.schemas.stats import StatsResponse

router = APIRouter(prefix="/stats", tags=["Analytics"])


# ---------------------------------------------------------
# DASHBOARD HEADER TOTALS
# ---------------------------------------------------------
@router.get("", response_model=StatsResponse)
def get_stats(mediaAsset: Optional[str] = Query(None), db: Session = Depends(get_db)):
    """
    Counts and pipeline value for the dashboard cards.
    Won, lost and on-hold leads are left out of every lead figure.
    """
    return StatsService(db).get_stats(media_asset=mediaAsset)
