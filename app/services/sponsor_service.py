import logging
from datetime import date, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from app.core.clock import local_today
from app.models.contact import Contact
from app.models.enums import normalize_media_assets
from app.models.lead import Lead
from app.models.media_asset import SponsorMediaAsset, sync_media_assets
from app.models.sponsor import Sponsor
from app.schemas.sponsor import CONTACT_FIELDS, ContractProgress, SponsorCreate, SponsorUpdate

logger = logging.getLogger(__name__)

EXPIRING_WINDOW_DAYS = 30
RENEWAL_FOLLOW_UP_DAYS = 3

NON_NULLABLE = ("contract_start", "contract_end", "status", "media_assets", "name")


def format_currency(value: Optional[float]) -> str:
    """USD with no decimals, '-' when there is no value (e.g. 50000 -> '$50,000')."""
    if not value:
        return "-"
    return f"${value:,.0f}"


# ---------------------------------------------------------
# CONTRACT MATH (display-only, nothing here is persisted)
# ---------------------------------------------------------
def contract_progress(contract_start: date, contract_end: date, today: date) -> float:
    """Share of the contract term already elapsed, clamped to 0..100."""
    total_days = (contract_end - contract_start).days
    elapsed_days = (today - contract_start).days
    if total_days <= 0:
        return 100.0 if elapsed_days >= 0 else 0.0
    return min(100.0, max(0.0, elapsed_days / total_days * 100))


def is_expiring_soon(contract_end: date, today: date, window_days: int = EXPIRING_WINDOW_DAYS) -> bool:
    return today <= contract_end <= today + timedelta(days=window_days)


def is_expired(status: str, contract_end: date, today: date) -> bool:
    # status is never flipped automatically, so this is a read-time judgment
    return status == "active" and contract_end < today


def describe_contract(sponsor: Sponsor, today: date) -> ContractProgress:
    return ContractProgress(
        progress=round(contract_progress(sponsor.contract_start, sponsor.contract_end, today)),
        days_left=(sponsor.contract_end - today).days,
        is_expiring_soon=sponsor.status == "active" and is_expiring_soon(sponsor.contract_end, today),
        is_expired=is_expired(sponsor.status, sponsor.contract_end, today),
    )


def filter_by_media_asset(query, media_asset: Optional[str]):
    if media_asset:
        return query.filter(Sponsor.media_asset_tags.any(SponsorMediaAsset.name == media_asset))
    return query


def _check_dates(contract_start: date, contract_end: date):
    if contract_end < contract_start:
        raise ValueError("contract_end must be on or after contract_start")


class SponsorService:
    def __init__(self, db: Session):
        self.db = db

    def get_sponsor(self, sponsor_id: int):
        return self.db.query(Sponsor).filter(Sponsor.id == sponsor_id).first()

    def list_sponsors(self, media_asset: Optional[str] = None):
        query = filter_by_media_asset(self.db.query(Sponsor), media_asset)
        return query.order_by(Sponsor.contract_end.asc(), Sponsor.id.asc()).all()

    def create_sponsor(self, data: SponsorCreate):
        name = data.name or data.company
        if not name:
            raise ValueError("Name or company is required")
        _check_dates(data.contract_start, data.contract_end)

        sponsor = Sponsor(
            contact=Contact(
                name=name,
                company=data.company,
                email=data.email,
                phone=data.phone,
            ),
            contract_start=data.contract_start,
            contract_end=data.contract_end,
            value=data.value,
            status=data.status or "active",
            notes=data.notes,
        )
        sponsor.media_assets = normalize_media_assets(data.media_assets)

        self.db.add(sponsor)
        self.db.commit()
        self.db.refresh(sponsor)
        logger.info(f"✅ Sponsor {sponsor.id} created for {name} ({sponsor.contract_start} -> {sponsor.contract_end})")
        return sponsor

    def update_sponsor(self, sponsor_id: int, data: SponsorUpdate):
        sponsor = self.get_sponsor(sponsor_id)
        if not sponsor:
            return None

        update_data = {
            k: v for k, v in data.model_dump(exclude_unset=True).items()
            if not (v is None and k in NON_NULLABLE)
        }
        _check_dates(
            update_data.get("contract_start", sponsor.contract_start),
            update_data.get("contract_end", sponsor.contract_end),
        )

        for key, value in update_data.items():
            if key in CONTACT_FIELDS:
                setattr(sponsor.contact, key, value)
            elif key == "media_assets":
                sync_media_assets(sponsor, normalize_media_assets(value))
            else:
                setattr(sponsor, key, value)

        self.db.commit()
        self.db.refresh(sponsor)
        return sponsor

    def set_status(self, sponsor_id: int, status: str):
        sponsor = self.get_sponsor(sponsor_id)
        if not sponsor:
            return None
        sponsor.status = status
        self.db.commit()
        self.db.refresh(sponsor)
        return sponsor

    def delete_sponsor(self, sponsor_id: int):
        sponsor = self.get_sponsor(sponsor_id)
        if not sponsor:
            return False

        self.db.delete(sponsor)
        self.db.commit()
        logger.info(f"🗑️ Sponsor {sponsor_id} deleted")
        return True

    # ---------------------------------------------------------
    # RENEWAL: sponsor -> fresh lead (sponsor itself untouched)
    # ---------------------------------------------------------
    def create_renewal_lead(self, sponsor_id: int, today: Optional[date] = None):
        sponsor = self.get_sponsor(sponsor_id)
        if not sponsor:
            return None

        today = today or local_today()
        contact = sponsor.contact
        lead = Lead(
            contact=Contact(
                name=contact.name,
                company=contact.company,
                email=contact.email,
                phone=contact.phone,
                notes=f"Renewal from existing sponsorship ({format_currency(sponsor.value)})",
            ),
            stage="new",
            value=sponsor.value,
            probability=50,
            next_follow_up=today + timedelta(days=RENEWAL_FOLLOW_UP_DAYS),
            source="Renewal",
        )
        lead.media_assets = list(sponsor.media_assets)

        self.db.add(lead)
        self.db.commit()
        self.db.refresh(lead)
        logger.info(f"🔁 Renewal lead {lead.id} created from sponsor {sponsor.id}")
        return lead

    # ---------------------------------------------------------
    # EXPIRY JOB (opt-in, see app.scheduler)
    # ---------------------------------------------------------
    def expire_overdue(self, today: Optional[date] = None) -> int:
        today = today or local_today()
        overdue = self.db.query(Sponsor).filter(
            Sponsor.status == "active",
            Sponsor.contract_end < today,
        ).all()

        for sponsor in overdue:
            sponsor.status = "expired"
        self.db.commit()
        return len(overdue)
