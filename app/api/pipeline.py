from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.services.lead_service import LeadService
from app.services.pipeline_service import PipelineService, stage_catalog
from app.schemas.lead import LeadResponse, PipelineBoard, StageInfo, StageUpdate

router = APIRouter(prefix="/pipeline", tags=["Pipeline Board"])


# 1. Kanban board
@router.get("", response_model=PipelineBoard)
def get_board(mediaAsset: Optional[str] = Query(None), db: Session = Depends(get_db)):
    return PipelineService(db).get_board(media_asset=mediaAsset)

# 2. Stage catalog
@router.get("/stages", response_model=List[StageInfo])
def get_stages():
    return stage_catalog()

# 3. Move a card (drag & drop)
@router.patch("/leads/{lead_id}", response_model=LeadResponse)
def move_lead(lead_id: int, payload: StageUpdate, db: Session = Depends(get_db)):
    lead = LeadService(db).move_stage(lead_id, payload.stage, payload.hold_reason)
    if not lead:
        raise HTTPException(status_code=404, detail="Lead not found")
    return lead
