import logging
from datetime import date, timedelta
from typing import Optional

from sqlalchemy import case, func, or_
from sqlalchemy.orm import Session

from app.core.clock import local_today
from app.models.contact import Contact
from app.models.enums import STAGE_ORDER, normalize_media_assets
from app.models.lead import Lead
from app.models.media_asset import LeadMediaAsset, sync_media_assets
from app.schemas.lead import CONTACT_FIELDS, LeadCreate, LeadUpdate

logger = logging.getLogger(__name__)

SORT_FIELDS = ("name", "value", "stage", "next_follow_up")

# Columns that can never be cleared by a patch
NON_NULLABLE = ("stage", "media_assets", "name")


def filter_by_media_asset(query, media_asset: Optional[str]):
    if media_asset:
        return query.filter(Lead.media_asset_tags.any(LeadMediaAsset.name == media_asset))
    return query


class LeadService:
    def __init__(self, db: Session):
        self.db = db

    # ---------------------------------------------------------
    # 1. READ
    # ---------------------------------------------------------
    def get_lead(self, lead_id: int):
        return self.db.query(Lead).filter(Lead.id == lead_id).first()

    def list_leads(
        self,
        media_asset: Optional[str] = None,
        search: Optional[str] = None,
        sort: str = "next_follow_up",
        order: str = "asc",
    ):
        """
        Leads tagged with media_asset (all leads when omitted).
        Default order is next follow-up ascending, undated leads last.
        """
        query = self.db.query(Lead).join(Lead.contact)
        query = filter_by_media_asset(query, media_asset)

        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Contact.name.ilike(pattern),
                Contact.company.ilike(pattern),
                Contact.email.ilike(pattern),
            ))

        return query.order_by(*self._ordering(sort, order), Lead.id.asc()).all()

    def _ordering(self, sort: str, order: str):
        descending = order == "desc"

        if sort == "name":
            col = Contact.name
        elif sort == "value":
            col = func.coalesce(Lead.value, 0)
        elif sort == "stage":
            col = case({s: i for i, s in enumerate(STAGE_ORDER)}, value=Lead.stage, else_=len(STAGE_ORDER))
        else:
            # Undated leads go last ascending; descending is the exact reverse
            nulls = Lead.next_follow_up.is_(None)
            if descending:
                return [nulls.desc(), Lead.next_follow_up.desc()]
            return [nulls.asc(), Lead.next_follow_up.asc()]

        return [col.desc() if descending else col.asc()]

    # ---------------------------------------------------------
    # 2. CREATE
    # ---------------------------------------------------------
    def create_lead(self, data: LeadCreate):
        name = data.name or data.company
        if not name:
            raise ValueError("Name or company is required")

        contact = Contact(
            name=name,
            company=data.company,
            email=data.email,
            phone=data.phone,
            notes=data.notes,
        )
        lead = Lead(
            contact=contact,
            stage=data.stage or "new",
            value=data.value,
            probability=data.probability if data.probability is not None else 50,
            next_follow_up=data.next_follow_up,
            follow_up_notes=data.follow_up_notes,
            source=data.source,
            hold_reason=data.hold_reason,
        )
        lead.media_assets = normalize_media_assets(data.media_assets)

        self.db.add(lead)
        self.db.commit()
        self.db.refresh(lead)
        logger.info(f"✅ Lead {lead.id} created for {contact.name} [{lead.stage}]")
        return lead

    # ---------------------------------------------------------
    # 3. UPDATE
    # ---------------------------------------------------------
    def update_lead(self, lead_id: int, data: LeadUpdate):
        lead = self.get_lead(lead_id)
        if not lead:
            return None

        # Update only provided fields
        update_data = data.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            if value is None and key in NON_NULLABLE:
                continue
            if key in CONTACT_FIELDS:
                setattr(lead.contact, key, value)
            elif key == "media_assets":
                sync_media_assets(lead, normalize_media_assets(value))
            else:
                setattr(lead, key, value)

        self.db.commit()
        self.db.refresh(lead)
        return lead

    def move_stage(self, lead_id: int, stage: str, hold_reason: Optional[str] = None):
        """Stage transitions are unguarded: any stage can follow any stage."""
        lead = self.get_lead(lead_id)
        if not lead:
            return None

        previous = lead.stage
        lead.stage = stage
        # hold_reason is only read while on_hold; it is kept on the way out so a re-hold shows it again
        if hold_reason is not None:
            lead.hold_reason = hold_reason

        self.db.commit()
        self.db.refresh(lead)
        logger.info(f"🔀 Lead {lead.id} moved {previous} -> {stage}")
        return lead

    def snooze_lead(self, lead_id: int, today: Optional[date] = None, days: int = 1):
        lead = self.get_lead(lead_id)
        if not lead:
            return None

        today = today or local_today()
        lead.next_follow_up = today + timedelta(days=days)
        self.db.commit()
        self.db.refresh(lead)
        return lead

    # ---------------------------------------------------------
    # 4. DELETE (contact goes with it)
    # ---------------------------------------------------------
    def delete_lead(self, lead_id: int):
        lead = self.get_lead(lead_id)
        if not lead:
            return False

        self.db.delete(lead)
        self.db.commit()
        logger.info(f"🗑️ Lead {lead_id} deleted")
        return True
