import logging

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.security import verify_inbound_secret
from app.services.extraction_service import ExtractionService
from app.services.inbound_email_service import InboundEmailService
from app.services.llm_service import ExtractionError, LLMService, get_llm_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/inbound-email", tags=["Inbound Email"])


@router.post("", dependencies=[Depends(verify_inbound_secret)])
def receive_email(
    payload: dict = Body(...),
    db: Session = Depends(get_db),
    llm: LLMService = Depends(get_llm_service),
):
    """
    Webhook for forwarded emails (Zapier, Mailgun, SendGrid, Postmark...).
    Creates a lead only when the model judges it a real business inquiry.
    """
    service = InboundEmailService(db, ExtractionService(llm))
    try:
        return service.process(payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ExtractionError as e:
        logger.error(f"❌ Inbound email error: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to process email")


@router.get("")
def describe_webhook():
    return {
        "status": "ok",
        "message": "Inbound email webhook is active. POST email data to create leads.",
        "expectedFormat": {
            "from": "sender@example.com",
            "subject": "Email subject",
            "body": "Email content",
        },
    }
