from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import date, datetime

from app.models.enums import STAGE_ORDER
from app.schemas.common import ContactResponse, MediaAssetsMixin, blank_to_none, coerce_date, tags_as_list

CONTACT_FIELDS = ("name", "company", "email", "phone", "notes")


# --- 1. WRITE PAYLOADS (explicit whitelist, unknown keys rejected) ---
class LeadBase(MediaAssetsMixin):
    # Contact identity
    name: Optional[str] = None
    company: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None

    # Deal
    stage: Optional[str] = None
    value: Optional[float] = None
    probability: Optional[int] = Field(None, ge=0, le=100)
    next_follow_up: Optional[date] = None
    follow_up_notes: Optional[str] = None
    source: Optional[str] = None
    hold_reason: Optional[str] = None
    media_assets: Optional[List[str]] = None

    class Config:
        extra = "forbid"

    @field_validator("*", mode="before")
    @classmethod
    def _blank_strings(cls, value):
        return blank_to_none(value)

    @field_validator("next_follow_up", mode="before")
    @classmethod
    def _parse_follow_up(cls, value):
        return coerce_date(value)

    @field_validator("stage")
    @classmethod
    def _check_stage(cls, value):
        if value is not None and value not in STAGE_ORDER:
            raise ValueError(f"Unknown stage: {value}")
        return value


class LeadCreate(LeadBase):
    pass


class LeadUpdate(LeadBase):
    pass


class StageUpdate(BaseModel):
    stage: str
    hold_reason: Optional[str] = None

    class Config:
        extra = "forbid"

    @field_validator("stage")
    @classmethod
    def _check_stage(cls, value):
        if value not in STAGE_ORDER:
            raise ValueError(f"Unknown stage: {value}")
        return value


# --- 2. RESPONSES ---
class LeadResponse(BaseModel):
    id: int
    contact_id: int
    contact: ContactResponse

    stage: str
    value: Optional[float] = None
    probability: Optional[int] = None
    next_follow_up: Optional[date] = None
    follow_up_notes: Optional[str] = None
    source: Optional[str] = None
    hold_reason: Optional[str] = None
    media_assets: List[str] = []

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @field_validator("media_assets", mode="before")
    @classmethod
    def _tags(cls, value):
        return tags_as_list(value)


# --- 3. KANBAN BOARD ---
class StageInfo(BaseModel):
    id: str
    label: str
    is_active: bool


class PipelineColumn(BaseModel):
    stage: str
    label: str
    count: int
    total_value: float  # null values count as 0
    leads: List[LeadResponse]


class PipelineBoard(BaseModel):
    media_asset: Optional[str] = None
    columns: List[PipelineColumn]       # active stages, in pipeline order
    side_columns: List[PipelineColumn]  # on_hold, won, lost
