from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.clock import local_today
from app.core.database import get_db
from app.services.sponsor_service import SponsorService, describe_contract
from app.schemas.lead import LeadResponse
from app.schemas.sponsor import SponsorCreate, SponsorResponse, SponsorUpdate, StatusUpdate

router = APIRouter(prefix="/sponsors", tags=["Sponsors"])


def to_response(sponsor, today=None) -> SponsorResponse:
    item = SponsorResponse.model_validate(sponsor)
    item.contract = describe_contract(sponsor, today or local_today())
    return item


# --- READ ALL (soonest contract end first) ---
@router.get("", response_model=List[SponsorResponse])
def list_sponsors(mediaAsset: Optional[str] = Query(None), db: Session = Depends(get_db)):
    today = local_today()
    return [to_response(s, today) for s in SponsorService(db).list_sponsors(media_asset=mediaAsset)]

# --- CREATE ---
@router.post("", response_model=SponsorResponse)
def create_sponsor(payload: SponsorCreate, db: Session = Depends(get_db)):
    try:
        sponsor = SponsorService(db).create_sponsor(payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return to_response(sponsor)

# --- READ ONE ---
@router.get("/{sponsor_id}", response_model=SponsorResponse)
def get_sponsor(sponsor_id: int, db: Session = Depends(get_db)):
    sponsor = SponsorService(db).get_sponsor(sponsor_id)
    if not sponsor:
        raise HTTPException(status_code=404, detail="Sponsor not found")
    return to_response(sponsor)

# --- UPDATE ---
@router.patch("/{sponsor_id}", response_model=SponsorResponse)
def update_sponsor(sponsor_id: int, payload: SponsorUpdate, db: Session = Depends(get_db)):
    try:
        updated = SponsorService(db).update_sponsor(sponsor_id, payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not updated:
        raise HTTPException(status_code=404, detail="Sponsor not found")
    return to_response(updated)

# --- STATUS ---
@router.patch("/{sponsor_id}/status", response_model=SponsorResponse)
def set_sponsor_status(sponsor_id: int, payload: StatusUpdate, db: Session = Depends(get_db)):
    sponsor = SponsorService(db).set_status(sponsor_id, payload.status)
    if not sponsor:
        raise HTTPException(status_code=404, detail="Sponsor not found")
    return to_response(sponsor)

# --- RENEWAL LEAD ---
@router.post("/{sponsor_id}/renewal-lead", response_model=LeadResponse)
def create_renewal_lead(sponsor_id: int, db: Session = Depends(get_db)):
    """Opens a new lead for renewing this sponsorship. The sponsor is left as-is."""
    lead = SponsorService(db).create_renewal_lead(sponsor_id)
    if not lead:
        raise HTTPException(status_code=404, detail="Sponsor not found")
    return lead

# --- DELETE ---
@router.delete("/{sponsor_id}")
def delete_sponsor(sponsor_id: int, db: Session = Depends(get_db)):
    success = SponsorService(db).delete_sponsor(sponsor_id)
    if not success:
        raise HTTPException(status_code=404, detail="Sponsor not found")
    return {"success": True}
