"""
Report Format Detection

Classifies extracted report text into one of the supported vendor
formats: keyword identifiers first, structural heuristics second, and
the Generic format as the unconditional fallback.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from .numeric_extractor import SQFT_UNIT, SQUARES_UNIT

logger = logging.getLogger(__name__)


class ReportFormat(Enum):
    IROOF = "iRoof"
    EAGLEVIEW = "EagleView"
    HOVER = "Hover"
    ROOFSNAP = "RoofSnap"
    GENERIC = "Generic"


@dataclass(frozen=True)
class FormatDescriptor:
    """A supported report format and the keywords that identify it."""
    name: str
    report_format: ReportFormat
    identifiers: Tuple[str, ...] = ()


# Declared order is detection order; Generic must stay last
FORMATS: List[FormatDescriptor] = [
    FormatDescriptor("iRoof", ReportFormat.IROOF, ("iRoof", "iroof.com")),
    FormatDescriptor("EagleView", ReportFormat.EAGLEVIEW, ("EagleView", "eagleview.com", "Pictometry")),
    FormatDescriptor("Hover", ReportFormat.HOVER, ("HOVER", "hover.to", "Hover Report")),
    FormatDescriptor("RoofSnap", ReportFormat.ROOFSNAP, ("RoofSnap",)),
    FormatDescriptor("Generic", ReportFormat.GENERIC, ()),
]

_FORMATS_BY_ENUM = {descriptor.report_format: descriptor for descriptor in FORMATS}

_FLAGS = re.IGNORECASE | re.MULTILINE

# Structural markers for tier-2 detection
FEET_INCHES_TOKEN = r'\d+\s*[\'’′]\s*\d+\s*["”″]'
SQUARES_TOKEN = rf'\d[\d,]*(?:\.\d+)?\s*{SQUARES_UNIT}'
PITCH_AREA_TOKEN = r'\d{1,2}\s*/\s*12\s*[:\-]?\s*\d[\d,]*(?:\.\d+)?\s*(?:sqft|sq\.?\s*ft)'
SQFT_TOKEN = rf'\d[\d,]*(?:\.\d+)?\s*{SQFT_UNIT}'
TOTAL_ROOF_AREA = r'Total\s+Roof\s+Area'
FACET_TOKEN = r'\bFacets?\b'


def descriptor_for(report_format: ReportFormat) -> FormatDescriptor:
    return _FORMATS_BY_ENUM[report_format]


def _has(pattern: str, text: str) -> bool:
    return re.search(pattern, text, _FLAGS) is not None


def _match_identifiers(text: str) -> Optional[FormatDescriptor]:
    lowered = text.lower()
    for descriptor in FORMATS:
        for identifier in descriptor.identifiers:
            if identifier.lower() in lowered:
                logger.debug(f"Identifier '{identifier}' matched format {descriptor.name}")
                return descriptor
    return None


def _match_structure(text: str) -> FormatDescriptor:
    if _has(FEET_INCHES_TOKEN, text) and (_has(SQUARES_TOKEN, text) or _has(PITCH_AREA_TOKEN, text)):
        return descriptor_for(ReportFormat.IROOF)
    if _has(TOTAL_ROOF_AREA, text) or (_has(SQFT_TOKEN, text) and _has(FACET_TOKEN, text)):
        return descriptor_for(ReportFormat.EAGLEVIEW)
    return descriptor_for(ReportFormat.GENERIC)


def detect_format(text: str) -> FormatDescriptor:
    """
    Pick the best-matching format for a report.

    Tier 1 is a case-insensitive keyword search in declared format order.
    Tier 2 runs only when no keyword matched:
        - feet-inches tokens plus squares or pitch-area tokens -> iRoof
        - "Total Roof Area", or sqft tokens alongside "Facet" -> EagleView
        - anything else -> Generic

    Args:
        text: Full extracted report text

    Returns:
        FormatDescriptor (never None)
    """
    descriptor = _match_identifiers(text)
    if descriptor is not None:
        logger.info(f"Detected format: {descriptor.name}")
        return descriptor

    descriptor = _match_structure(text)
    logger.info(f"Detected format from report structure: {descriptor.name}")
    return descriptor
