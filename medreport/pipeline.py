"""
Module 3: Upload pipeline
PDF bytes -> page text -> structured record, with the error mapping the HTTP layer returns
"""
import json
import logging
import os
from datetime import datetime
from typing import Dict, Optional, Tuple

from medreport.errors import InvalidInputType
from medreport.model_context import ProcessingContext
from medreport.models import StructuredMedicalRecord
from medreport.pdf_extractor import PDFTextExtractor
from medreport.settings import Settings
from medreport.text_structurer import MedicalTextStructurer

logger = logging.getLogger("medreport.pipeline")

PDF_CONTENT_TYPE = "application/pdf"
INVALID_TYPE_ERROR = {"error": "Invalid file type"}
PROCESSING_ERROR = {"error": "Error processing PDF file"}


def check_content_type(content_type: Optional[str]):
    declared = (content_type or "").split(";")[0].strip().lower()
    if declared != PDF_CONTENT_TYPE:
        raise InvalidInputType(f"Unsupported file type: {content_type}")


def dump_debug(dump_dir: Optional[str], name: str, payload) -> Optional[str]:
    if not dump_dir:
        return None
    fname = f"{name}_{datetime.now().strftime('%Y%m%d_%H%M%S_%f')}.json"
    path = os.path.join(dump_dir, fname)
    try:
        os.makedirs(dump_dir, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
    except OSError as e:
        logger.warning("Could not write debug dump %s: %s", path, e)
        return None
    return path


def process_report(data: bytes, settings: Settings,
                   extractor: Optional[PDFTextExtractor] = None,
                   structurer: Optional[MedicalTextStructurer] = None) -> StructuredMedicalRecord:
    extractor = extractor or PDFTextExtractor.from_settings(settings)
    structurer = structurer or MedicalTextStructurer.from_settings(settings)

    pages = extractor.extract(data)
    dump_debug(settings.debug_dump_dir, "initialPdfData", pages)

    with ProcessingContext(enable_model=settings.enable_model) as ctx:
        record = structurer.structure(pages, ctx)

    dump_debug(settings.debug_dump_dir, "structuredData", record.to_dict())
    return record


def process_upload(data: Optional[bytes], content_type: Optional[str],
                   settings: Optional[Settings] = None,
                   extractor: Optional[PDFTextExtractor] = None,
                   structurer: Optional[MedicalTextStructurer] = None) -> Tuple[int, Dict]:
    """Return (status_code, payload) for one uploaded file."""
    settings = settings or Settings()
    try:
        check_content_type(content_type)
        if data is None:
            raise InvalidInputType("No file provided")
    except InvalidInputType as e:
        logger.warning("Rejected upload: %s", e)
        return e.status_code, dict(INVALID_TYPE_ERROR)

    try:
        record = process_report(data, settings, extractor, structurer)
    except Exception:
        logger.exception("Error processing PDF")
        return 500, dict(PROCESSING_ERROR)

    return 200, {"success": True, "data": record.to_dict()}
