"""Inbound email webhook: payload shapes, gating and lead creation."""

import asyncio
import json
import time
from datetime import date

import httpx
import pytest
from fastapi.testclient import TestClient

from app.core.config import settings
from app.main import app
from app.models.lead import Lead
from app.services.extraction_service import ExtractionService
from app.services.inbound_email_service import InboundEmailService, parse_email_webhook
from app.services.llm_service import ExtractionError

BUSINESS_REPLY = json.dumps({
    "company": "Acme",
    "name": "Jane Doe",
    "email": "jane@acme.com",
    "phone": None,
    "value": "12,000",
    "notes": "Wants a sponsorship package for Q3",
    "shouldCreateLead": True,
})


class TestWebhookShapes:
    def test_generic(self):
        shape, email = parse_email_webhook({"from": "a@x.com", "subject": "Hi", "text": "Body"})
        assert shape == "generic"
        assert (email.sender, email.subject, email.body) == ("a@x.com", "Hi", "Body")

    def test_mailgun(self):
        shape, email = parse_email_webhook({"body-plain": "Hello", "subject": "Ad slots"})
        assert shape == "mailgun"
        assert email.body == "Hello"

    def test_sendgrid_string_envelope(self):
        payload = {"envelope": json.dumps({"from": "b@y.com"}), "subject": "S", "html": "<p>Hi</p>"}
        shape, email = parse_email_webhook(payload)
        assert shape == "sendgrid"
        assert email.sender == "b@y.com"
        assert email.body == "<p>Hi</p>"

    def test_postmark(self):
        payload = {"FromFull": {"Email": "c@z.com"}, "Subject": "S", "TextBody": "T"}
        shape, email = parse_email_webhook(payload)
        assert shape == "postmark"
        assert (email.sender, email.subject, email.body) == ("c@z.com", "S", "T")

    def test_fallback_uses_whole_payload(self):
        payload = {"email": "d@w.com", "Subject": "S", "unexpected": "field"}
        shape, email = parse_email_webhook(payload)
        assert shape == "fallback"
        assert email.sender == "d@w.com"
        assert json.loads(email.body) == payload


class TestInboundEmailService:
    def test_creates_lead(self, db, fake_llm):
        fake_llm.reply = BUSINESS_REPLY
        service = InboundEmailService(db, ExtractionService(fake_llm))

        result = service.process(
            {"from": "jane@acme.com", "subject": "Sponsorship", "body": "Hi there", "mediaAsset": "Predicted"},
            today=date(2024, 7, 1),
        )

        assert result["success"] is True
        lead = db.get(Lead, result["lead"]["id"])
        assert lead.stage == "new"
        assert lead.source == "Email"
        assert lead.probability == 50
        assert lead.value == 12000
        assert lead.next_follow_up == date(2024, 7, 4)
        assert lead.follow_up_notes == "Inbound email: Sponsorship"
        assert lead.contact.name == "Jane Doe"
        assert list(lead.media_assets) == ["Predicted"]

    def test_sender_used_when_model_finds_nothing(self, db, fake_llm):
        fake_llm.reply = '{"shouldCreateLead": true}'
        service = InboundEmailService(db, ExtractionService(fake_llm))

        result = service.process({"from": "x@corp.com", "body": "Hello"})
        lead = db.get(Lead, result["lead"]["id"])
        assert lead.contact.name == "x@corp.com"
        assert lead.contact.email == "x@corp.com"
        assert list(lead.media_assets) == ["Tokenized"]

    def test_missing_body(self, db, fake_llm):
        service = InboundEmailService(db, ExtractionService(fake_llm))
        with pytest.raises(ValueError):
            service.process({"from": "x@corp.com", "subject": "empty"})
        assert fake_llm.calls == []


class TestInboundEmailEndpoint:
    def test_not_a_business_inquiry(self, client, db, fake_llm):
        fake_llm.reply = '{"company": "Newsletter Co", "shouldCreateLead": false}'

        response = client.post("/inbound-email", json={"from": "news@letter.com", "body": "Weekly digest"})
        assert response.status_code == 200
        assert "no lead created" in response.json()["message"]
        assert response.json()["extracted"]["company"] == "Newsletter Co"
        assert db.query(Lead).count() == 0

    def test_reply_without_json_creates_nothing(self, client, db, fake_llm):
        fake_llm.reply = "This looks like spam."
        response = client.post("/inbound-email", json={"from": "a@b.com", "body": "Buy now"})
        assert response.status_code == 200
        assert "no lead created" in response.json()["message"]
        assert db.query(Lead).count() == 0

    def test_creates_lead(self, client, db, fake_llm):
        fake_llm.reply = BUSINESS_REPLY
        response = client.post("/inbound-email", json={"from": "jane@acme.com", "subject": "Hi", "body": "Hello"})
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Lead created from email"
        assert data["lead"]["company"] == "Acme"
        assert db.query(Lead).count() == 1

    def test_malformed_model_json_is_500(self, client, db, fake_llm):
        fake_llm.reply = '{"company": Acme, "shouldCreateLead": true}'
        response = client.post("/inbound-email", json={"from": "a@b.com", "body": "Hello"})
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to parse AI response"}
        assert db.query(Lead).count() == 0

    def test_model_failure_is_500(self, client, fake_llm):
        fake_llm.error = ExtractionError("timeout")
        response = client.post("/inbound-email", json={"from": "a@b.com", "body": "Hello"})
        assert response.status_code == 500

    def test_no_body_is_400(self, client):
        response = client.post("/inbound-email", json={"from": "a@b.com", "subject": "nothing"})
        assert response.status_code == 400
        assert response.json() == {"error": "No email content found"}

    def test_invalid_json(self, client):
        response = client.post("/inbound-email", content=b"not json", headers={"content-type": "application/json"})
        assert response.status_code == 400

    def test_non_object_body(self, client):
        response = client.post("/inbound-email", json=["from", "body"])
        assert response.status_code == 400
        assert "error" in response.json()

    def test_secret_required_when_configured(self, client, fake_llm, monkeypatch):
        monkeypatch.setattr(settings, "INBOUND_EMAIL_SECRET", "s3cret")
        fake_llm.reply = BUSINESS_REPLY
        payload = {"from": "jane@acme.com", "body": "Hello"}

        assert client.post("/inbound-email", json=payload).status_code == 401
        wrong = client.post("/inbound-email", json=payload, headers={"Authorization": "Bearer nope"})
        assert wrong.status_code == 401
        assert wrong.json() == {"error": "Unauthorized"}
        assert fake_llm.calls == []

        ok = client.post("/inbound-email", json=payload, headers={"Authorization": "Bearer s3cret"})
        assert ok.status_code == 200

    def test_liveness(self, client):
        data = client.get("/inbound-email").json()
        assert data["status"] == "ok"
        assert set(data["expectedFormat"]) == {"from", "subject", "body"}


class TestUntypedModelOutput:
    def test_non_string_fields_are_cleaned(self, client, db, fake_llm):
        fake_llm.reply = json.dumps({
            "shouldCreateLead": True,
            "name": {"first": "Ann"},
            "company": ["Acme", "Acme Ltd"],
            "phone": 5551234,
            "notes": "Wants a podcast read",
        })

        response = client.post("/inbound-email", json={"from": "ann@acme.com", "body": "Hello"})
        assert response.status_code == 200

        lead = db.get(Lead, response.json()["lead"]["id"])
        assert lead.contact.name == "ann@acme.com"
        assert lead.contact.company is None
        assert lead.contact.phone == "5551234"
        assert lead.contact.notes == "Wants a podcast read"

    def test_unexpected_failure_keeps_error_shape(self, client, db, fake_llm):
        fake_llm.error = RuntimeError("connection reset")
        unguarded = TestClient(app, raise_server_exceptions=False)

        response = unguarded.post("/inbound-email", json={"from": "a@b.com", "body": "Hello"})
        assert response.status_code == 500
        assert response.headers["content-type"].startswith("application/json")
        assert response.json() == {"error": "Internal server error"}
        assert db.query(Lead).count() == 0


class TestWebhookConcurrency:
    def test_slow_model_does_not_stall_the_app(self, client, fake_llm):
        fake_llm.reply = '{"shouldCreateLead": false}'
        fake_llm.delay = 0.5

        async def fire():
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
                webhook = asyncio.ensure_future(
                    ac.post("/inbound-email", json={"from": "a@b.com", "body": "Hello"})
                )
                await asyncio.sleep(0.1)
                started = time.perf_counter()
                ping = await ac.get("/")
                latency = time.perf_counter() - started
                return await webhook, ping, latency

        webhook, ping, latency = asyncio.run(fire())

        assert webhook.status_code == 200
        assert ping.status_code == 200
        assert latency < 0.3
