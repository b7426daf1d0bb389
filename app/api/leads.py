from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.services.lead_service import LeadService
from app.schemas.lead import LeadCreate, LeadResponse, LeadUpdate

router = APIRouter(prefix="/leads", tags=["Leads"])


# --- READ ALL ---
@router.get("", response_model=List[LeadResponse])
def list_leads(
    mediaAsset: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    sort: str = Query("next_follow_up", enum=["name", "value", "stage", "next_follow_up"]),
    order: str = Query("asc", enum=["asc", "desc"]),
    db: Session = Depends(get_db)
):
    service = LeadService(db)
    return service.list_leads(media_asset=mediaAsset, search=search, sort=sort, order=order)

# --- CREATE ---
@router.post("", response_model=LeadResponse)
def create_lead(payload: LeadCreate, db: Session = Depends(get_db)):
    service = LeadService(db)
    try:
        return service.create_lead(payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

# --- READ ONE ---
@router.get("/{lead_id}", response_model=LeadResponse)
def get_lead(lead_id: int, db: Session = Depends(get_db)):
    lead = LeadService(db).get_lead(lead_id)
    if not lead:
        raise HTTPException(status_code=404, detail="Lead not found")
    return lead

# --- UPDATE (partial; contact fields are forwarded to the contact) ---
@router.patch("/{lead_id}", response_model=LeadResponse)
def update_lead(lead_id: int, payload: LeadUpdate, db: Session = Depends(get_db)):
    updated = LeadService(db).update_lead(lead_id, payload)
    if not updated:
        raise HTTPException(status_code=404, detail="Lead not found")
    return updated

# --- SNOOZE (follow up tomorrow) ---
@router.post("/{lead_id}/snooze", response_model=LeadResponse)
def snooze_lead(lead_id: int, db: Session = Depends(get_db)):
    lead = LeadService(db).snooze_lead(lead_id)
    if not lead:
        raise HTTPException(status_code=404, detail="Lead not found")
    return lead

# --- DELETE ---
@router.delete("/{lead_id}")
def delete_lead(lead_id: int, db: Session = Depends(get_db)):
    success = LeadService(db).delete_lead(lead_id)
    if not success:
        raise HTTPException(status_code=404, detail="Lead not found")
    return {"success": True}
