from datetime import datetime
from typing import Optional
from pydantic import BaseModel, field_validator

from app.models.enums import normalize_media_assets


def blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def coerce_date(value):
    """Accepts 'YYYY-MM-DD' as well as full ISO timestamps sent by form pickers."""
    value = blank_to_none(value)
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10 and value[10] in ("T", " "):
        return value[:10]
    return value


class ContactResponse(BaseModel):
    id: int
    name: str
    company: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MediaAssetsMixin(BaseModel):
    """Validation for the media asset tag list on write payloads."""

    @field_validator("media_assets", mode="before", check_fields=False)
    @classmethod
    def _check_media_assets(cls, value):
        value = blank_to_none(value)
        if value is None:
            return None
        if isinstance(value, str):
            value = [value]
        return normalize_media_assets(value)


def tags_as_list(value):
    # association proxies are list-like but not lists
    return list(value or [])
