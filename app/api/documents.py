import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from app.services.extraction_service import ExtractionService, UnsupportedFileType
from app.services.llm_service import ExtractionError, LLMService, get_llm_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Document Extraction"])


@router.post("/parse-document")
def parse_document(
    file: Optional[UploadFile] = File(None),
    type: str = Form("lead"),  # 'lead' | 'sponsor'
    llm: LLMService = Depends(get_llm_service),
):
    """
    Pre-fills a lead/sponsor form from an uploaded PDF, image or text file.
    Returns whatever fields the model found; {} when nothing was usable.
    """
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file provided")

    raw = file.file.read()
    try:
        return ExtractionService(llm).extract_document(raw, file.content_type, file.filename, type)
    except UnsupportedFileType as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ExtractionError as e:
        logger.error(f"❌ Document parsing error: {e}")
        raise HTTPException(status_code=500, detail="Failed to parse document")
