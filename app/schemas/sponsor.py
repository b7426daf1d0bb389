from pydantic import BaseModel, field_validator
from typing import List, Optional
from datetime import date, datetime

from app.models.enums import SponsorStatus
from app.schemas.common import ContactResponse, MediaAssetsMixin, blank_to_none, coerce_date, tags_as_list

CONTACT_FIELDS = ("name", "company", "email", "phone")

SPONSOR_STATUSES = [s.value for s in SponsorStatus]


def _check_status(value):
    if value is not None and value not in SPONSOR_STATUSES:
        raise ValueError(f"Unknown status: {value}")
    return value


# --- 1. WRITE PAYLOADS ---
class SponsorFields(MediaAssetsMixin):
    # Contact identity (sponsor notes live on the sponsor, not the contact)
    name: Optional[str] = None
    company: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    contract_start: Optional[date] = None
    contract_end: Optional[date] = None
    value: Optional[float] = None
    status: Optional[str] = None
    notes: Optional[str] = None
    media_assets: Optional[List[str]] = None

    class Config:
        extra = "forbid"

    @field_validator("*", mode="before")
    @classmethod
    def _blank_strings(cls, value):
        return blank_to_none(value)

    @field_validator("contract_start", "contract_end", mode="before")
    @classmethod
    def _parse_dates(cls, value):
        return coerce_date(value)

    @field_validator("status")
    @classmethod
    def _status(cls, value):
        return _check_status(value)


class SponsorCreate(SponsorFields):
    contract_start: date
    contract_end: date


class SponsorUpdate(SponsorFields):
    pass


# --- 2. RESPONSES ---
class ContractProgress(BaseModel):
    progress: int            # 0..100, rounded
    days_left: int           # negative once the end date has passed
    is_expiring_soon: bool   # ends within the next 30 days
    is_expired: bool         # still 'active' but end date passed


class SponsorResponse(BaseModel):
    id: int
    contact_id: int
    contact: ContactResponse

    contract_start: date
    contract_end: date
    value: Optional[float] = None
    status: str
    notes: Optional[str] = None
    media_assets: List[str] = []

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Derived at read time, never stored
    contract: Optional[ContractProgress] = None

    class Config:
        from_attributes = True

    @field_validator("media_assets", mode="before")
    @classmethod
    def _tags(cls, value):
        return tags_as_list(value)


class StatusUpdate(BaseModel):
    status: str

    class Config:
        extra = "forbid"

    @field_validator("status")
    @classmethod
    def _status(cls, value):
        return _check_status(value)
