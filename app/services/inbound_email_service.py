import json
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.clock import local_today
from app.models.contact import Contact
from app.models.enums import normalize_media_assets
from app.models.lead import Lead
from app.services.extraction_service import ExtractionService

logger = logging.getLogger(__name__)

INBOUND_FOLLOW_UP_DAYS = 3


@dataclass
class InboundEmail:
    sender: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None


def _first(payload: dict, *keys):
    for key in keys:
        value = payload.get(key)
        if value:
            return value
    return None


# ---------------------------------------------------------
# WEBHOOK SHAPES (predicate + extractor, tried in order)
# ---------------------------------------------------------
def _generic(payload):
    return InboundEmail(
        sender=_first(payload, "from", "sender", "from_email"),
        subject=payload.get("subject"),
        body=_first(payload, "body", "text", "plain", "body_plain", "html", "content"),
    )


def _mailgun(payload):
    return InboundEmail(
        sender=payload.get("sender"),
        subject=payload.get("subject"),
        body=_first(payload, "body-plain", "stripped-text"),
    )


def _sendgrid_envelope(payload):
    envelope = payload.get("envelope")
    if isinstance(envelope, str):
        try:
            envelope = json.loads(envelope)
        except json.JSONDecodeError:
            envelope = {}
    return envelope if isinstance(envelope, dict) else {}


def _sendgrid(payload):
    return InboundEmail(
        sender=_sendgrid_envelope(payload).get("from"),
        subject=payload.get("subject"),
        body=_first(payload, "text", "html"),
    )


def _postmark(payload):
    from_full = payload.get("FromFull")
    sender = from_full.get("Email") if isinstance(from_full, dict) else None
    return InboundEmail(
        sender=sender or payload.get("From"),
        subject=payload.get("Subject"),
        body=_first(payload, "TextBody", "HtmlBody"),
    )


def _fallback(payload):
    return InboundEmail(
        sender=_first(payload, "from", "sender", "email", "from_email"),
        subject=_first(payload, "subject", "Subject"),
        body=_first(payload, "body", "text", "content", "message", "html") or json.dumps(payload),
    )


@dataclass(frozen=True)
class WebhookShape:
    name: str
    matches: Callable[[dict], bool]
    extract: Callable[[dict], InboundEmail]


WEBHOOK_SHAPES = (
    WebhookShape("generic", lambda p: bool(p.get("from") or p.get("sender")), _generic),
    WebhookShape("mailgun", lambda p: bool(p.get("sender") or p.get("body-plain")), _mailgun),
    WebhookShape("sendgrid", lambda p: bool(p.get("envelope")), _sendgrid),
    WebhookShape("postmark", lambda p: bool(p.get("FromFull") or p.get("TextBody")), _postmark),
)
FALLBACK_SHAPE = WebhookShape("fallback", lambda p: True, _fallback)


def parse_email_webhook(payload: dict):
    """Returns (shape name, InboundEmail) for the first matching webhook convention."""
    for shape in WEBHOOK_SHAPES:
        if shape.matches(payload):
            return shape.name, shape.extract(payload)
    return FALLBACK_SHAPE.name, FALLBACK_SHAPE.extract(payload)


def payload_media_assets(payload: dict):
    assets = payload.get("mediaAssets")
    if isinstance(assets, list):
        return normalize_media_assets(assets)
    if payload.get("mediaAsset"):
        return normalize_media_assets([payload["mediaAsset"]])
    return normalize_media_assets(None)


def _to_text(value):
    """Model output is untyped: numbers become strings, objects and lists are dropped."""
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _to_float(value):
    if value in (None, ""):
        return None
    try:
        return float(str(value).replace(",", "").replace("$", ""))
    except ValueError:
        return None


# ---------------------------------------------------------
# SERVICE
# ---------------------------------------------------------
class InboundEmailService:
    def __init__(self, db: Session, extractor: ExtractionService):
        self.db = db
        self.extractor = extractor

    def process(self, payload: dict, today: Optional[date] = None) -> dict:
        shape, email = parse_email_webhook(payload)
        if not email.body:
            raise ValueError("No email content found")

        media_assets = payload_media_assets(payload)
        logger.info(f"📨 Inbound email ({shape}) from {email.sender or 'unknown sender'}")

        extracted = self.extractor.extract_email(email.sender, email.subject, email.body)
        if not extracted or not extracted.get("shouldCreateLead"):
            logger.info("📭 Inbound email skipped: not a business inquiry")
            return {
                "message": "Email processed but no lead created (not a business inquiry)",
                "extracted": extracted,
            }

        lead = self._create_lead(email, extracted, media_assets, today or local_today())
        return {
            "success": True,
            "message": "Lead created from email",
            "lead": {
                "id": lead.id,
                "company": lead.contact.company,
                "email": lead.contact.email,
            },
        }

    def _create_lead(self, email: InboundEmail, extracted: dict, media_assets, today: date):
        fields = {key: _to_text(extracted.get(key)) for key in ("name", "company", "email", "phone", "notes")}
        sender = _to_text(email.sender)

        contact = Contact(
            name=fields["name"] or fields["company"] or sender or "Unknown",
            company=fields["company"],
            email=fields["email"] or sender,
            phone=fields["phone"],
            notes=fields["notes"],
        )
        lead = Lead(
            contact=contact,
            stage="new",
            value=_to_float(extracted.get("value")),
            probability=50,
            next_follow_up=today + timedelta(days=INBOUND_FOLLOW_UP_DAYS),
            follow_up_notes=f"Inbound email: {_to_text(email.subject) or 'No subject'}",
            source="Email",
        )
        lead.media_assets = media_assets

        self.db.add(lead)
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(lead)
        logger.info(f"✅ Lead {lead.id} created from inbound email ({contact.name})")
        return lead
