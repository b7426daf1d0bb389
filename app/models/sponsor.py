from sqlalchemy import Column, Integer, String, Text, Float, Date, TIMESTAMP, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.ext.associationproxy import association_proxy
from datetime import datetime
from app.core.database import Base
from app.models.media_asset import SponsorMediaAsset

class Sponsor(Base):
    __tablename__ = "sponsors"

    id = Column(Integer, primary_key=True, index=True)

    contact_id = Column(Integer, ForeignKey("contacts.id"), nullable=False)
    contact = relationship("Contact", cascade="all, delete-orphan", single_parent=True, lazy="joined")

    contract_start = Column(Date, nullable=False)
    contract_end = Column(Date, nullable=False, index=True)

    value = Column(Float, nullable=True)

    # 'active' | 'expired' | 'renewed' (never flipped automatically unless the expiry job is enabled)
    status = Column(String, default="active", nullable=False, index=True)

    notes = Column(Text)

    media_asset_tags = relationship(
        SponsorMediaAsset,
        cascade="all, delete-orphan",
        order_by=SponsorMediaAsset.id,
        lazy="selectin",
    )
    media_assets = association_proxy("media_asset_tags", "name")

    created_at = Column(TIMESTAMP, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)
