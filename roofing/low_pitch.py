"""
Low-Pitch and Pitch-Transition Analysis

Finds roof areas below a pitch threshold (they need ice & water shield
instead of felt) and detects pitch transitions. Also hosts the
pitch-by-area breakdown join used by the iRoof-family parser.
"""

import logging
import re
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .models import Measurements, PitchArea
from .numeric_extractor import (
    NUMBER,
    SQFT_UNIT,
    MAX_SUPPORTED_RISE,
    decimal_feet_pattern,
    extract_feet_inches,
    extract_number,
    extract_pitch_rises,
    parse_number,
)

logger = logging.getLogger(__name__)

DEFAULT_LOW_PITCH_THRESHOLD = 4

# Plausible size of a single roof facet; anything outside is most likely
# the whole-roof total or a stray number caught by the area index.
MIN_FACET_SQFT = 100.0
MAX_FACET_SQFT = 5000.0

_FLAGS = re.IGNORECASE | re.MULTILINE

# Area index: a short integer that is not the start of a longer number
_AREA_INDEX = r'Area\s*#?\s*(\d{1,3})(?![\d.,])'

# (pattern, has_area_group) - most specific surface form first
LOW_PITCH_PATTERNS: List[Tuple[str, bool]] = [
    (rf'{_AREA_INDEX}\s*(?:Pitch)?\s*(\d{{1,2}})\s*/\s*12\s*[:\-]?\s*{NUMBER}\s*{SQFT_UNIT}', True),
    (rf'(?<!\w)Pitch\s*(\d{{1,2}})\s*/\s*12\s*[:\-]?\s*{NUMBER}\s*{SQFT_UNIT}', False),
    (rf'(?<![\d/])(\d{{1,2}})\s*/\s*12\s*[:\-]?\s*{NUMBER}\s*{SQFT_UNIT}', False),
]

# Two independently labelled streams joined by area index
PITCH_BY_AREA = rf'{_AREA_INDEX}\s*[:\-]?\s*(?:Pitch\s*[:=]?\s*)?(\d{{1,2}})\s*/\s*12(?![\d/])'
SQFT_BY_AREA = (
    rf'{_AREA_INDEX}\s*[:\-]?\s*'
    rf'(?:(?:Pitch\s*[:=]?\s*)?\d{{1,2}}\s*/\s*12\s*[:\-]?\s*)?'
    rf'{NUMBER}\s*{SQFT_UNIT}'
)

TRANSITION_LABEL = r'Transitions?'


@dataclass
class LowPitchAnalysis:
    """Low-pitch area and transition findings for one report."""
    low_pitch_sq_ft: float = 0.0
    low_pitch_areas: List[str] = field(default_factory=list)
    transition_feet: float = 0.0
    transition_descriptions: List[str] = field(default_factory=list)

    def apply_to(self, measurements: Measurements) -> None:
        measurements.low_pitch_sq_ft = self.low_pitch_sq_ft
        measurements.low_pitch_areas = list(self.low_pitch_areas)
        measurements.transition_feet = self.transition_feet
        measurements.transition_descriptions = list(self.transition_descriptions)


def _overlaps(span: Tuple[int, int], taken: List[Tuple[int, int]]) -> bool:
    start, end = span
    return any(start < t_end and end > t_start for t_start, t_end in taken)


def analyze_low_pitch(text: str, threshold: int = DEFAULT_LOW_PITCH_THRESHOLD) -> LowPitchAnalysis:
    """
    Sum the square footage of areas below the pitch threshold and detect
    pitch transitions.

    Three surface forms are recognised: "Area N Pitch P/12: S sqft",
    "Pitch P/12: S sqft" and "P/12: S sqft". A span claimed by a more
    specific form is not counted again by a looser one.

    Transition footage comes from an explicit "Transition" measurement
    when the report has one. Otherwise, when two or more distinct pitches
    appear anywhere in the text, one "P1/12 to P2/12" descriptor is
    emitted per adjacent pair of sorted pitches. That fallback is a
    heuristic proxy for the presence of transition flashing, not a
    measured length, and it over-reports on documents that mention
    unrelated pitches (e.g. a cover-page pitch plus a facet pitch).

    Args:
        text: Extracted report text
        threshold: Pitch numerators strictly below this are low-pitch

    Returns:
        LowPitchAnalysis with totals, descriptors and transitions
    """
    analysis = LowPitchAnalysis()
    taken: List[Tuple[int, int]] = []

    for pattern, has_area in LOW_PITCH_PATTERNS:
        for match in re.finditer(pattern, text, _FLAGS):
            if _overlaps(match.span(), taken):
                continue
            taken.append(match.span())

            if has_area:
                area_name = f"Area {match.group(1)}"
                rise = int(match.group(2))
                sq_ft = parse_number(match.group(3)) or 0.0
            else:
                area_name = ""
                rise = int(match.group(1))
                sq_ft = parse_number(match.group(2)) or 0.0

            if rise < threshold and sq_ft > 0:
                analysis.low_pitch_sq_ft += sq_ft
                description = f"{rise}/12: {sq_ft:.0f} sqft"
                if area_name:
                    description = f"{area_name} {description}"
                analysis.low_pitch_areas.append(description)
                logger.debug(f"Low-pitch area (under {threshold}/12): {description}")

    transition = extract_feet_inches(text, TRANSITION_LABEL)
    if transition is None:
        transition = extract_number(text, [decimal_feet_pattern(TRANSITION_LABEL)])

    if transition is not None:
        analysis.transition_feet = transition
        logger.debug(f"Found transition: {transition} LF")
    else:
        rises = sorted(extract_pitch_rises(text))
        if len(rises) > 1:
            analysis.transition_descriptions = [
                f"{low}/12 to {high}/12" for low, high in zip(rises, rises[1:])
            ]
            logger.debug(f"Inferred pitch transitions: {', '.join(analysis.transition_descriptions)}")

    if analysis.low_pitch_sq_ft > 0:
        logger.info(f"Low-pitch area requiring ice & water: {analysis.low_pitch_sq_ft:.0f} sqft")

    return analysis


def extract_pitch_breakdown(text: str) -> List[PitchArea]:
    """
    Build a pitch breakdown by joining two labelled streams on area index.

    One stream maps "Area N" to its pitch, the other maps "Area N" to its
    square footage. The join depends on both streams carrying the same
    incidental area numbering, so this is a heuristic rather than a
    guaranteed-correct extraction. Joined facets outside 100-5000 sqft are
    discarded as likely false matches, pitches above 12/12 are dropped, and
    facets sharing a pitch are summed.

    Returns:
        PitchArea list ordered by ascending pitch
    """
    pitch_by_area: Dict[str, int] = OrderedDict()
    for match in re.finditer(PITCH_BY_AREA, text, _FLAGS):
        pitch_by_area.setdefault(match.group(1), int(match.group(2)))

    sqft_by_area: Dict[str, float] = OrderedDict()
    for match in re.finditer(SQFT_BY_AREA, text, _FLAGS):
        value = parse_number(match.group(2))
        if value is not None:
            sqft_by_area.setdefault(match.group(1), value)

    totals: Dict[int, float] = {}
    for area, rise in pitch_by_area.items():
        sq_ft = sqft_by_area.get(area)
        if sq_ft is None:
            continue
        if not MIN_FACET_SQFT <= sq_ft <= MAX_FACET_SQFT:
            logger.debug(f"Area {area}: {sq_ft} sqft outside plausible facet size, skipped")
            continue
        if rise > MAX_SUPPORTED_RISE:
            continue
        totals[rise] = totals.get(rise, 0.0) + sq_ft

    return [PitchArea(pitch=f"{rise}/12", sq_ft=totals[rise]) for rise in sorted(totals)]


def dominant_pitch(breakdown: List[PitchArea]) -> Optional[str]:
    """Pitch of the largest area; on equal areas the first one wins."""
    best: Optional[PitchArea] = None
    for area in breakdown:
        if best is None or area.sq_ft > best.sq_ft:
            best = area
    return best.pitch if best else None


def low_pitch_from_breakdown(
    breakdown: List[PitchArea],
    threshold: int = DEFAULT_LOW_PITCH_THRESHOLD,
) -> Tuple[float, List[str]]:
    """Low-pitch total and descriptors taken from a pitch breakdown."""
    total = 0.0
    descriptions: List[str] = []
    for area in breakdown:
        if area.rise < threshold and area.sq_ft > 0:
            total += area.sq_ft
            descriptions.append(f"{area.pitch}: {area.sq_ft:.0f} sqft")
    return total, descriptions
