from pydantic import BaseModel
from typing import List, Optional

from app.schemas.lead import LeadResponse
from app.schemas.sponsor import SponsorResponse


class StatsResponse(BaseModel):
    total_leads: int
    active_sponsors: int
    leads_needing_follow_up: int
    overdue_leads: int
    expiring_soon: int
    pipeline_value: float


class OverdueLead(LeadResponse):
    days_overdue: int


class DashboardResponse(BaseModel):
    media_asset: Optional[str] = None
    stats: StatsResponse
    today_leads: List[LeadResponse]
    overdue_leads: List[OverdueLead]
    active_sponsors: List[SponsorResponse]
    sponsor_revenue: float
