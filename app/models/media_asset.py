from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint
from app.core.database import Base


# ---------------------------------------------------------
# Media asset tags (one row per tag, so membership filters are a plain EXISTS)
# ---------------------------------------------------------
class LeadMediaAsset(Base):
    __tablename__ = "lead_media_assets"
    __table_args__ = (UniqueConstraint("lead_id", "name"),)

    id = Column(Integer, primary_key=True, index=True)
    lead_id = Column(Integer, ForeignKey("leads.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False, index=True)

    def __init__(self, name=None, **kwargs):
        super().__init__(name=name, **kwargs)


class SponsorMediaAsset(Base):
    __tablename__ = "sponsor_media_assets"
    __table_args__ = (UniqueConstraint("sponsor_id", "name"),)

    id = Column(Integer, primary_key=True, index=True)
    sponsor_id = Column(Integer, ForeignKey("sponsors.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False, index=True)

    def __init__(self, name=None, **kwargs):
        super().__init__(name=name, **kwargs)


def sync_media_assets(entity, tags):
    """
    Brings entity.media_assets in line with tags.
    Only adds/removes the difference so unchanged rows are never re-inserted
    (the (owner, name) unique constraint would trip on delete+insert).
    """
    current = list(entity.media_assets)
    for name in current:
        if name not in tags:
            entity.media_assets.remove(name)
    for name in tags:
        if name not in current:
            entity.media_assets.append(name)
