import logging
from datetime import date, timedelta
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.clock import local_today
from app.models.enums import INACTIVE_STAGES
from app.models.lead import Lead
from app.models.sponsor import Sponsor
from app.services import lead_service, sponsor_service
from app.schemas.lead import LeadResponse
from app.schemas.sponsor import SponsorResponse
from app.schemas.stats import DashboardResponse, OverdueLead, StatsResponse

logger = logging.getLogger(__name__)


class StatsService:
    """
    Dashboard numbers, computed as database queries.
    Every "today" boundary is a calendar day (see app.core.clock).
    """

    def __init__(self, db: Session):
        self.db = db

    # --- BASE QUERIES ---

    def _active_leads(self, media_asset: Optional[str]):
        query = self.db.query(Lead).filter(Lead.stage.notin_(INACTIVE_STAGES))
        return lead_service.filter_by_media_asset(query, media_asset)

    def _active_sponsors(self, media_asset: Optional[str]):
        query = self.db.query(Sponsor).filter(Sponsor.status == "active")
        return sponsor_service.filter_by_media_asset(query, media_asset)

    # --- MAIN LOGIC ---

    def get_stats(self, media_asset: Optional[str] = None, today: Optional[date] = None) -> StatsResponse:
        today = today or local_today()
        tomorrow = today + timedelta(days=1)
        expiring_cutoff = today + timedelta(days=sponsor_service.EXPIRING_WINDOW_DAYS)

        leads = self._active_leads(media_asset)
        sponsors = self._active_sponsors(media_asset)

        # Null values are excluded here (the board column sum coerces them to 0 instead)
        pipeline_value = leads.filter(Lead.value.isnot(None))\
            .with_entities(func.sum(Lead.value)).scalar()

        return StatsResponse(
            total_leads=leads.count(),
            active_sponsors=sponsors.count(),
            leads_needing_follow_up=leads.filter(
                Lead.next_follow_up >= today,
                Lead.next_follow_up < tomorrow,
            ).count(),
            overdue_leads=leads.filter(Lead.next_follow_up < today).count(),
            expiring_soon=sponsors.filter(
                Sponsor.contract_end >= today,
                Sponsor.contract_end <= expiring_cutoff,
            ).count(),
            pipeline_value=pipeline_value or 0,
        )

    def get_dashboard(self, media_asset: Optional[str] = None, today: Optional[date] = None) -> DashboardResponse:
        today = today or local_today()

        due_today = self._active_leads(media_asset)\
            .filter(Lead.next_follow_up == today)\
            .order_by(Lead.id.asc()).all()

        overdue = self._active_leads(media_asset)\
            .filter(Lead.next_follow_up < today)\
            .order_by(Lead.next_follow_up.asc(), Lead.id.asc()).all()

        sponsors = self._active_sponsors(media_asset)\
            .order_by(Sponsor.contract_end.asc(), Sponsor.id.asc()).all()

        active_sponsors = []
        for s in sponsors:
            item = SponsorResponse.model_validate(s)
            item.contract = sponsor_service.describe_contract(s, today)
            active_sponsors.append(item)

        return DashboardResponse(
            media_asset=media_asset,
            stats=self.get_stats(media_asset, today),
            today_leads=[LeadResponse.model_validate(l) for l in due_today],
            overdue_leads=[
                OverdueLead(
                    **LeadResponse.model_validate(l).model_dump(),
                    days_overdue=(today - l.next_follow_up).days,
                )
                for l in overdue
            ],
            active_sponsors=active_sponsors,
            sponsor_revenue=sum(s.value or 0 for s in sponsors),
        )
