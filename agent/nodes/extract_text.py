"""
Node 1: Report Text Extraction
Reads the embedded text of the current report, page by page.
"""

import logging
from typing import Dict, Any

from roofing.report_parser import NO_TEXT_WARNING
from roofing.text_extractor import extract_report_text

from ..state import RoofTakeoffState

logger = logging.getLogger(__name__)


def extract_text_node(state: RoofTakeoffState) -> Dict[str, Any]:
    """
    Extract text from the current report file.

    Args:
        state: Current workflow state

    Returns:
        State updates with extracted_text, extraction_method, page_count,
        or last_error
    """
    current_file = state.get("current_file")

    if not current_file:
        return {
            "last_error": "No file specified for extraction",
            "extraction_method": "error"
        }

    try:
        report = extract_report_text(current_file)
    except Exception as e:
        logger.error(f"Extraction failed: {e}")
        return {
            "last_error": f"Extraction failed: {str(e)}",
            "extraction_method": "error",
            "extracted_text": ""
        }

    if report.errors and not report.has_text:
        logger.error(f"Could not read {report.filename}: {report.errors}")
        return {
            "last_error": "; ".join(report.errors),
            "extraction_method": report.extraction_method,
            "extracted_text": "",
            "page_count": report.page_count
        }

    if not report.has_text:
        return {
            "last_error": NO_TEXT_WARNING,
            "extraction_method": report.extraction_method,
            "extracted_text": "",
            "page_count": report.page_count
        }

    return {
        "extracted_text": report.full_text,
        "extraction_method": report.extraction_method,
        "page_count": report.page_count,
        "last_error": None
    }
