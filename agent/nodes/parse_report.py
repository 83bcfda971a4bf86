"""
Node 2: Measurement Parsing
Detects the report vendor and extracts the roof measurements.
"""

import logging
from typing import Dict, Any

from roofing.report_parser import parse_report

from ..state import RoofTakeoffState

logger = logging.getLogger(__name__)


def parse_report_node(state: RoofTakeoffState) -> Dict[str, Any]:
    """
    Parse extracted report text into measurements.

    A low-confidence parse is kept and flagged for verification; only a
    parse that found nothing at all is treated as a failure.

    Args:
        state: Current workflow state

    Returns:
        State updates with parse_result, or last_error
    """
    text = state.get("extracted_text") or ""
    threshold = state.get("confidence_threshold", 80.0)

    try:
        result = parse_report(text, state.get("low_pitch_threshold", 4))
    except Exception as e:
        logger.error(f"Parsing failed: {e}")
        return {"last_error": f"Parsing failed: {str(e)}", "parse_result": None}

    data = result.to_dict()
    data["needs_verification"] = result.needs_verification(threshold)

    for warning in result.warnings:
        logger.warning(f"Parse warning: {warning}")

    if not result.is_successful:
        return {
            "parse_result": data,
            "last_error": "No measurements could be extracted"
        }

    if data["needs_verification"]:
        logger.warning(
            f"Confidence {result.confidence:.0f}% is below {threshold:.0f}% - "
            f"verify measurements against the report"
        )

    return {"parse_result": data, "last_error": None}
