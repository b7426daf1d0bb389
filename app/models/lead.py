from sqlalchemy import Column, Integer, String, Text, Float, Date, TIMESTAMP, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.ext.associationproxy import association_proxy
from datetime import datetime
from app.core.database import Base
from app.models.media_asset import LeadMediaAsset

class Lead(Base):
    __tablename__ = "leads"

    id = Column(Integer, primary_key=True, index=True)

    # The lead owns its contact: deleting the lead deletes the contact
    contact_id = Column(Integer, ForeignKey("contacts.id"), nullable=False)
    contact = relationship("Contact", cascade="all, delete-orphan", single_parent=True, lazy="joined")

    # 'new' -> 'contacted' -> 'meeting' -> 'proposal' -> 'negotiation' | 'on_hold' | 'won' | 'lost'
    stage = Column(String, default="new", nullable=False, index=True)

    value = Column(Float, nullable=True)
    probability = Column(Integer, default=50)

    next_follow_up = Column(Date, nullable=True, index=True)
    follow_up_notes = Column(Text)

    source = Column(String)  # 'Email', 'Renewal', 'Referral'...
    hold_reason = Column(Text)  # only shown while stage == 'on_hold'

    media_asset_tags = relationship(
        LeadMediaAsset,
        cascade="all, delete-orphan",
        order_by=LeadMediaAsset.id,
        lazy="selectin",
    )
    media_assets = association_proxy("media_asset_tags", "name")

    created_at = Column(TIMESTAMP, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)
