"""Shared pytest fixtures.

Fixtures:
    - db: Session on a fresh in-memory SQLite database
    - fake_llm: Stand-in for the hosted model, records every call
    - client: TestClient wired to db and fake_llm
    - make_lead / make_sponsor: Factories going through the services
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("INBOUND_EMAIL_SECRET", None)
os.environ.pop("APP_TIMEZONE", None)

import time
from datetime import date
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.core.database import Base, get_db
from app.main import app
from app.schemas.lead import LeadCreate
from app.schemas.sponsor import SponsorCreate
from app.services.lead_service import LeadService
from app.services.llm_service import get_llm_service
from app.services.sponsor_service import SponsorService


class FakeLLM:
    """Returns a canned reply (or raises) and keeps the content it was sent."""

    def __init__(self, reply: str = "{}", error: Exception = None, delay: float = 0):
        self.reply = reply
        self.error = error
        self.delay = delay  # seconds, blocking like the real SDK call
        self.calls = []

    def complete(self, content):
        self.calls.append(content)
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture(autouse=True)
def open_webhook(monkeypatch):
    """Webhook secret off unless a test turns it on."""
    monkeypatch.setattr(settings, "INBOUND_EMAIL_SECRET", None)


@pytest.fixture
def client(db: Session, fake_llm: FakeLLM) -> Generator[TestClient, None, None]:
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_llm_service] = lambda: fake_llm
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_lead(db: Session):
    def _make(**fields):
        fields.setdefault("name", "Jane Doe")
        return LeadService(db).create_lead(LeadCreate(**fields))
    return _make


@pytest.fixture
def make_sponsor(db: Session):
    def _make(**fields):
        fields.setdefault("company", "Acme Corp")
        fields.setdefault("contract_start", date(2024, 1, 1))
        fields.setdefault("contract_end", date(2025, 1, 1))
        return SponsorService(db).create_sponsor(SponsorCreate(**fields))
    return _make
