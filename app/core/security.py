from typing import Optional
from fastapi import Header, HTTPException

from app.core.config import settings


def verify_inbound_secret(authorization: Optional[str] = Header(None)):
    """
    Shared-secret check for the inbound email webhook.
    Open when INBOUND_EMAIL_SECRET is not configured.
    """
    secret = settings.INBOUND_EMAIL_SECRET
    if not secret:
        return

    token = authorization.replace("Bearer ", "") if authorization else None
    if token != secret:
        raise HTTPException(status_code=401, detail="Unauthorized")
