from sqlalchemy import Column, Integer, String, Text, TIMESTAMP
from datetime import datetime
from app.core.database import Base

class Contact(Base):
    __tablename__ = "contacts"

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String, nullable=False)
    company = Column(String)
    email = Column(String)
    phone = Column(String)

    notes = Column(Text)

    created_at = Column(TIMESTAMP, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)
