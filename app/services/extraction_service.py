import base64
import json
import logging
from typing import Optional

from app.services.llm_service import ExtractionError, LLMService

logger = logging.getLogger(__name__)

TEXT_SUFFIXES = (".txt", ".md")


class UnsupportedFileType(ValueError):
    pass


# ---------------------------------------------------------
# PROMPTS
# ---------------------------------------------------------
SPONSOR_PROMPT = """You are extracting data from a business contract, invoice, or statement of work.

Look carefully for:
- COMPANY NAME: the client/customer, "Bill To", "Client:", letterhead, or the other party to the agreement (not us).
- CONTRACT VALUE: total amount, contract value, fees, "Total:". Number only, no currency symbols or commas.
- DATES: start/effective date and end/expiration date, or the term length.
- EMAIL: any email addresses mentioned.

Return ONLY this JSON (use null if not found):
{
  "company": "the client/customer company name",
  "email": "contact email if found",
  "contractStart": "YYYY-MM-DD",
  "contractEnd": "YYYY-MM-DD",
  "value": 50000,
  "notes": "one line summary of scope/services"
}

Return only valid JSON, nothing else."""

LEAD_PROMPT = """You are extracting data from a business document (proposal, email, SOW, etc).

Look carefully for:
- COMPANY NAME: the prospect company - letterhead, signatures, "From:", company mentions.
- DEAL VALUE: pricing, budget, contract amount or quoted figures. Number only, no currency symbols or commas.
- EMAIL / PHONE: contact details.

Return ONLY this JSON (use null if not found):
{
  "company": "the prospect company name",
  "email": "contact email if found",
  "phone": "phone number if found",
  "value": 25000,
  "notes": "brief summary of their interest/needs"
}

Return only valid JSON, nothing else."""

EMAIL_PROMPT = """You are extracting lead information from a forwarded business email.

Email Details:
- From: {sender}
- Subject: {subject}
- Body:
{body}

Extract the following information about the SENDER (the potential lead/prospect). Return ONLY this JSON:
{{
  "company": "their company name (email domain, signature, or mentions)",
  "name": "contact person's name if mentioned",
  "email": "their email address",
  "phone": "phone number if mentioned",
  "value": estimated deal value as a number if any amounts are mentioned (null if not),
  "notes": "brief summary of what they want or are asking about",
  "shouldCreateLead": true or false (false for spam, newsletters, or anything that is not a business inquiry)
}}

Return only valid JSON, nothing else."""


def extraction_prompt(form_type: str) -> str:
    return SPONSOR_PROMPT if form_type == "sponsor" else LEAD_PROMPT


# ---------------------------------------------------------
# REPLY PARSING
# ---------------------------------------------------------
def find_json_object(text: str) -> Optional[str]:
    """
    First balanced {...} region of text, skipping braces inside string literals.
    """
    if not text:
        return None

    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
            elif ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return text[start:i + 1]
        # unbalanced from here on, try the next opening brace
        start = text.find("{", start + 1)
    return None


def parse_extracted_data(text: str, strict: bool = False) -> dict:
    """
    Loosely-typed dict from a model reply. Anything unparseable gives {}.
    With strict=True a JSON region that fails to parse raises ExtractionError instead.
    """
    candidate = find_json_object(text)
    if candidate is None:
        return {}

    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as e:
        if strict:
            raise ExtractionError("Failed to parse AI response") from e
        logger.warning(f"⚠️ Could not parse model reply as JSON: {e}")
        return {}

    return data if isinstance(data, dict) else {}


# ---------------------------------------------------------
# DOCUMENT EXTRACTION
# ---------------------------------------------------------
def build_document_content(raw: bytes, content_type: str, filename: str, form_type: str):
    """
    Message content for the model: PDFs and images as base64 attachments,
    text inlined into the prompt. Anything else is rejected before a model call.
    """
    content_type = (content_type or "").lower()
    filename = filename or ""
    prompt = extraction_prompt(form_type)

    if content_type == "application/pdf":
        data = base64.b64encode(raw).decode("ascii")
        return [
            {
                "type": "file",
                "file": {
                    "filename": filename or "document.pdf",
                    "file_data": f"data:application/pdf;base64,{data}",
                },
            },
            {"type": "text", "text": prompt},
        ]

    if content_type.startswith("image/"):
        data = base64.b64encode(raw).decode("ascii")
        return [
            {"type": "image_url", "image_url": {"url": f"data:{content_type};base64,{data}"}},
            {"type": "text", "text": prompt},
        ]

    if content_type.startswith("text/") or filename.lower().endswith(TEXT_SUFFIXES):
        text = raw.decode("utf-8", errors="replace")
        return f"{prompt}\n\nDocument content:\n{text}"

    raise UnsupportedFileType("Unsupported file type. Use PDF, images, or text files.")


class ExtractionService:
    def __init__(self, llm: LLMService):
        self.llm = llm

    def extract_document(self, raw: bytes, content_type: str, filename: str, form_type: str = "lead") -> dict:
        content = build_document_content(raw, content_type, filename, form_type)
        reply = self.llm.complete(content)
        data = parse_extracted_data(reply)
        logger.info(f"📄 Extracted {len(data)} field(s) from {filename or 'upload'} [{form_type}]")
        return data

    def extract_email(self, sender: Optional[str], subject: Optional[str], body: str) -> dict:
        prompt = EMAIL_PROMPT.format(
            sender=sender or "Unknown",
            subject=subject or "No subject",
            body=body,
        )
        reply = self.llm.complete(prompt)
        return parse_extracted_data(reply, strict=True)
