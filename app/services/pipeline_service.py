from typing import Optional

from sqlalchemy.orm import Session

from app.models.enums import ACTIVE_STAGES, INACTIVE_STAGES, STAGES
from app.schemas.lead import LeadResponse, PipelineBoard, PipelineColumn, StageInfo
from app.services.lead_service import LeadService

STAGE_LABELS = {s.value: label for s, label in STAGES}


def stage_catalog():
    return [
        StageInfo(id=s.value, label=label, is_active=s.value in ACTIVE_STAGES)
        for s, label in STAGES
    ]


def column_value(leads) -> float:
    # Blank values count as 0 on the board
    return sum(l.value or 0 for l in leads)


def build_column(stage: str, leads) -> PipelineColumn:
    stage_leads = [l for l in leads if l.stage == stage]
    return PipelineColumn(
        stage=stage,
        label=STAGE_LABELS[stage],
        count=len(stage_leads),
        total_value=column_value(stage_leads),
        leads=[LeadResponse.model_validate(l) for l in stage_leads],
    )


class PipelineService:
    def __init__(self, db: Session):
        self.db = db

    def get_board(self, media_asset: Optional[str] = None) -> PipelineBoard:
        leads = LeadService(self.db).list_leads(media_asset=media_asset)

        return PipelineBoard(
            media_asset=media_asset,
            columns=[build_column(stage, leads) for stage in ACTIVE_STAGES],
            side_columns=[build_column(stage, leads) for stage in INACTIVE_STAGES],
        )
