"""
Vendor Report Parsers

One parser per supported report layout plus a Generic fallback. Every
parser follows the same sequence:

    1. total area in square feet
    2. total roofing squares (with the squares/sqft plausibility guard)
    3. linear footage per edge type (feet-inches first, then decimal feet)
    4. dominant pitch
    5. low-pitch areas and transitions
    6. confidence = fields found / fields expected * 100

Parsers never raise on bad input; unresolved fields become warnings.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .format_detector import ReportFormat
from .low_pitch import (
    DEFAULT_LOW_PITCH_THRESHOLD,
    analyze_low_pitch,
    dominant_pitch,
    extract_pitch_breakdown,
    low_pitch_from_breakdown,
)
from .models import LinearField, Measurements, PitchArea
from .numeric_extractor import (
    NUMBER,
    SQFT_UNIT,
    SQUARES_UNIT,
    decimal_feet_pattern,
    extract_feet_inches,
    extract_labeled_pitch,
    extract_number,
    extract_pitch,
    pitch_to_multiplier,
)

logger = logging.getLogger(__name__)

# A "squares" figure above this is almost certainly square feet
MAX_PLAUSIBLE_SQUARES = 500.0

GENERIC_PENALTY = 0.8
GENERIC_WARNING = "Using generic parser - results may be less accurate"
NOTHING_FOUND_WARNING = "No measurements could be extracted. Please enter manually."

# =============================================================================
# Patterns
# =============================================================================

# Explicit sqft suffixes are preferred over bare numbers
SQFT_PATTERNS = [
    rf'Total\s*(?:Roof\s*)?Area\s*[:=]?\s*{NUMBER}\s*(?:{SQFT_UNIT}|SF\b)',
    rf'{NUMBER}\s*{SQFT_UNIT}(?!\s*per)',
]

EAGLEVIEW_AREA_PATTERNS = [
    rf'Total\s*Roof\s*Area\s*[:=]?\s*{NUMBER}\s*(?:{SQFT_UNIT}|SF\b)',
    rf'(?<!\w)Roof\s*Area\s*[:=]?\s*{NUMBER}',
    rf'Total\s*Area\s*[:=]?\s*{NUMBER}\s*(?:{SQFT_UNIT}|SF\b)',
]

# "SQ" is squares only when it is not the start of "sq ft" / "square feet"
SQUARES_PATTERNS = [
    rf'Total\s*Squares?\s*[:=]?\s*{NUMBER}\s*{SQUARES_UNIT}',
    rf'{NUMBER}\s*{SQUARES_UNIT}',
    rf'{NUMBER}\s*squares\b',
    rf'Total\s*Squares?\s*[:=]?\s*{NUMBER}\s*$',
]

IROOF_LABELS: List[Tuple[str, LinearField]] = [
    (r'Ridges?', LinearField.RIDGE),
    (r'Valleys?', LinearField.VALLEY),
    (r'Rakes?', LinearField.RAKE),
    (r'Eaves?', LinearField.EAVE),
    (r'Hips?', LinearField.HIP),
    (r'Step\s*Flashing', LinearField.STEP_FLASHING),
]

EAGLEVIEW_LABELS: List[Tuple[str, LinearField]] = [
    (r'Ridges?(?:\s*/\s*Hips?)?', LinearField.RIDGE),
    (r'Valleys?', LinearField.VALLEY),
    (r'Rakes?', LinearField.RAKE),
    (r'Eaves?(?:\s*/\s*Starter)?', LinearField.EAVE),
    (r'Hips?', LinearField.HIP),
    (r'Step\s*Flashing', LinearField.STEP_FLASHING),
]

# EagleView-family confidence covers these edges only
EAGLEVIEW_COUNTED = (LinearField.RIDGE, LinearField.VALLEY, LinearField.RAKE, LinearField.EAVE)

# Generic layout: (label patterns, target field), tried in order.
# Later entries for a field only apply when an earlier one found nothing.
GENERIC_FIELDS: List[Tuple[Sequence[str], LinearField]] = [
    ((r'Ridges?',), LinearField.RIDGE),
    ((r'Valleys?',), LinearField.VALLEY),
    ((r'Rakes?',), LinearField.RAKE),
    ((r'Gables?', r'Rake\s*Edges?'), LinearField.RAKE),
    ((r'Eaves?',), LinearField.EAVE),
    ((r'Eave\s*Edges?', r'Starter'), LinearField.EAVE),
    ((r'Hips?',), LinearField.HIP),
    ((r'Step\s*Flashing',), LinearField.STEP_FLASHING),
    ((r'Wall\s*Flashing',), LinearField.STEP_FLASHING),
]

GENERIC_COUNTED = (
    LinearField.RIDGE, LinearField.VALLEY, LinearField.RAKE,
    LinearField.EAVE, LinearField.HIP, LinearField.STEP_FLASHING,
)


def _labeled_number_pattern(label: str) -> str:
    """'Ridge: 45' with no unit; excludes pitch-like 'N/12' values on the same line."""
    return rf'(?<![/\w]){label}\s*[:=]\s*{NUMBER}(?![ \t]*/)(?!\d|\.\d)'


# =============================================================================
# Shared steps
# =============================================================================

@dataclass
class VendorParseOutput:
    measurements: Measurements
    confidence: float
    warnings: List[str] = field(default_factory=list)


class _FieldTally:
    """Counts resolved fields and collects warnings for missing ones."""

    def __init__(self, expected: int, warnings: Optional[List[str]] = None):
        self.expected = expected
        self.found = 0
        self.warnings: List[str] = warnings if warnings is not None else []

    def record(self, name: str, resolved: bool) -> None:
        if resolved:
            self.found += 1
        else:
            self.warnings.append(f"Could not find {name}")

    def confidence(self, penalty: float = 1.0) -> float:
        if self.expected <= 0:
            return 0.0
        value = self.found / self.expected * 100.0 * penalty
        return max(0.0, min(value, 100.0))


def _resolve_area(
    text: str,
    measurements: Measurements,
    sqft_patterns: Sequence[str] = SQFT_PATTERNS,
) -> Tuple[bool, bool]:
    """
    Populate total_sq_ft and total_squares.

    Square feet are read first. A "squares" match above 500 is treated as
    an unconverted square-feet figure: it back-fills square feet when none
    was found, and is otherwise discarded. Whatever single quantity is
    found, the other is derived so the pair always agrees.

    Returns:
        (area resolved, squares resolved)
    """
    sq_ft = extract_number(text, sqft_patterns)
    squares = extract_number(text, SQUARES_PATTERNS)

    if squares is not None and squares > MAX_PLAUSIBLE_SQUARES:
        if sq_ft is None:
            logger.warning(f"Squares value {squares} looks like sqft, converting to {squares / 100.0:.2f} SQ")
            sq_ft = squares
        else:
            logger.warning(f"Ignoring implausible squares value {squares}; using {sq_ft} sqft")
        squares = None

    if sq_ft is not None:
        measurements.total_sq_ft = sq_ft
        measurements.total_squares = sq_ft / 100.0
        if squares is not None and abs(squares - sq_ft / 100.0) > 0.5:
            logger.debug(f"Report squares {squares} disagree with {sq_ft} sqft; using sqft")
        logger.debug(f"Found total area: {sq_ft} sqft ({measurements.total_squares:.2f} SQ)")
    elif squares is not None:
        measurements.total_squares = squares
        measurements.total_sq_ft = squares * 100.0
        logger.debug(f"Found total squares: {squares} SQ")

    resolved = measurements.total_sq_ft > 0
    return resolved, resolved


def _extract_linear(text: str, label: str, loose: bool = False) -> Optional[float]:
    value = extract_feet_inches(text, label)
    if value is None:
        value = extract_number(text, [decimal_feet_pattern(label)])
    if value is None and loose:
        value = extract_number(text, [_labeled_number_pattern(label)])
    return value


def _resolve_pitch(text: str, measurements: Measurements, breakdown: List[PitchArea]) -> bool:
    """Labelled pitch, else the largest breakdown area, else any bare pitch."""
    pitch = extract_labeled_pitch(text) or dominant_pitch(breakdown) or extract_pitch(text)
    if pitch is None:
        return False
    measurements.pitch = pitch
    measurements.pitch_multiplier = pitch_to_multiplier(pitch)
    logger.debug(f"Found pitch: {pitch} (multiplier: {measurements.pitch_multiplier:.3f})")
    return True


def _resolve_low_pitch(
    text: str,
    measurements: Measurements,
    breakdown: List[PitchArea],
    threshold: int,
) -> None:
    analysis = analyze_low_pitch(text, threshold)
    analysis.apply_to(measurements)
    if measurements.low_pitch_sq_ft == 0 and breakdown:
        total, descriptions = low_pitch_from_breakdown(breakdown, threshold)
        if total > 0:
            measurements.low_pitch_sq_ft = total
            measurements.low_pitch_areas = descriptions
            logger.debug(f"Low-pitch area taken from pitch breakdown: {total:.0f} sqft")


# =============================================================================
# Variants
# =============================================================================

def parse_iroof_format(text: str, low_pitch_threshold: int = DEFAULT_LOW_PITCH_THRESHOLD) -> VendorParseOutput:
    """
    Feet-inches-centric layout (iRoof, RoofSnap).

    Expected fields (8): total area, squares, ridge, valley, rake, eave,
    hip, step flashing. Pitch is extracted but not counted.
    """
    measurements = Measurements()
    tally = _FieldTally(expected=8)

    area_found, squares_found = _resolve_area(text, measurements)
    tally.record("total area", area_found)
    tally.record("total squares", squares_found)

    for label, linear_field in IROOF_LABELS:
        value = _extract_linear(text, label)
        if value is not None:
            measurements.set_linear_feet(linear_field, value)
            logger.debug(f"Found {linear_field.label}: {value:.2f} ft")
        tally.record(linear_field.label, value is not None)

    breakdown = extract_pitch_breakdown(text)
    measurements.pitch_breakdown = breakdown
    _resolve_pitch(text, measurements, breakdown)
    _resolve_low_pitch(text, measurements, breakdown, low_pitch_threshold)

    return VendorParseOutput(measurements, tally.confidence(), tally.warnings)


def parse_eagleview_format(text: str, low_pitch_threshold: int = DEFAULT_LOW_PITCH_THRESHOLD) -> VendorParseOutput:
    """
    Decimal-feet-centric layout (EagleView, Hover).

    Expected fields (6): area, ridge, valley, rake, eave, pitch. Hip and
    step flashing are read when labelled but do not count.
    """
    measurements = Measurements()
    tally = _FieldTally(expected=6)

    area_found, _ = _resolve_area(text, measurements, EAGLEVIEW_AREA_PATTERNS)
    tally.record("roof area", area_found)

    for label, linear_field in EAGLEVIEW_LABELS:
        value = extract_number(text, [decimal_feet_pattern(label)])
        if value is None:
            value = extract_feet_inches(text, label)
        if value is not None:
            measurements.set_linear_feet(linear_field, value)
            logger.debug(f"Found {linear_field.label}: {value:.2f} ft")
        if linear_field in EAGLEVIEW_COUNTED:
            tally.record(linear_field.label, value is not None)

    tally.record("pitch", _resolve_pitch(text, measurements, []))
    _resolve_low_pitch(text, measurements, [], low_pitch_threshold)

    return VendorParseOutput(measurements, tally.confidence(), tally.warnings)


def parse_hover_format(text: str, low_pitch_threshold: int = DEFAULT_LOW_PITCH_THRESHOLD) -> VendorParseOutput:
    # Hover reports share the EagleView layout
    return parse_eagleview_format(text, low_pitch_threshold)


def parse_roofsnap_format(text: str, low_pitch_threshold: int = DEFAULT_LOW_PITCH_THRESHOLD) -> VendorParseOutput:
    # RoofSnap reports share the iRoof layout
    return parse_iroof_format(text, low_pitch_threshold)


def parse_generic_format(text: str, low_pitch_threshold: int = DEFAULT_LOW_PITCH_THRESHOLD) -> VendorParseOutput:
    """
    Fallback for unrecognised layouts.

    Walks GENERIC_FIELDS in order, skipping any field an earlier entry
    already filled. Same 8 expected fields as the iRoof parser, with a
    fixed 0.8 confidence penalty.
    """
    measurements = Measurements()
    tally = _FieldTally(expected=8, warnings=[GENERIC_WARNING])

    area_found, squares_found = _resolve_area(text, measurements)
    tally.record("total area", area_found)
    tally.record("total squares", squares_found)

    resolved = set()
    for labels, linear_field in GENERIC_FIELDS:
        if linear_field in resolved:
            continue
        for label in labels:
            value = _extract_linear(text, label, loose=True)
            if value is not None:
                measurements.set_linear_feet(linear_field, value)
                resolved.add(linear_field)
                logger.debug(f"Generic: found {linear_field.label}: {value:.2f} ft")
                break

    for linear_field in GENERIC_COUNTED:
        tally.record(linear_field.label, linear_field in resolved)

    _resolve_pitch(text, measurements, [])
    _resolve_low_pitch(text, measurements, [], low_pitch_threshold)

    if tally.found == 0:
        tally.warnings.append(NOTHING_FOUND_WARNING)

    return VendorParseOutput(measurements, tally.confidence(GENERIC_PENALTY), tally.warnings)


VendorParser = Callable[..., VendorParseOutput]

PARSERS: Dict[ReportFormat, VendorParser] = {
    ReportFormat.IROOF: parse_iroof_format,
    ReportFormat.EAGLEVIEW: parse_eagleview_format,
    ReportFormat.HOVER: parse_hover_format,
    ReportFormat.ROOFSNAP: parse_roofsnap_format,
    ReportFormat.GENERIC: parse_generic_format,
}
