"""
Roof Report Parser

Public entry point for turning extracted report text into a ParseResult:
detect the vendor format, run the matching parser, package the output.
Also builds Measurements from manually entered values.
"""

import logging
from typing import Iterable, Optional

from .format_detector import detect_format
from .low_pitch import DEFAULT_LOW_PITCH_THRESHOLD
from .models import Measurements, ParseResult
from .numeric_extractor import pitch_to_multiplier
from .vendor_parsers import PARSERS

logger = logging.getLogger(__name__)

NO_TEXT_WARNING = "PDF contains no extractable text (may be image-based)"


def parse_report(raw_text: str, low_pitch_threshold: int = DEFAULT_LOW_PITCH_THRESHOLD) -> ParseResult:
    """
    Parse the full text of a roof measurement report.

    Identical input always produces an identical result; nothing here
    keeps state between calls.

    Args:
        raw_text: Page texts of one report, newline-joined
        low_pitch_threshold: Pitch numerators below this count as low-pitch

    Returns:
        ParseResult. Empty or whitespace-only text yields zero confidence
        and a warning rather than an exception.
    """
    raw_text = raw_text or ""
    if not raw_text.strip():
        logger.warning("No extractable text in report")
        return ParseResult(
            measurements=Measurements(),
            confidence=0.0,
            detected_format=None,
            warnings=[NO_TEXT_WARNING],
            raw_text=raw_text,
        )

    logger.debug(f"Parsing {len(raw_text)} characters of report text")
    descriptor = detect_format(raw_text)
    output = PARSERS[descriptor.report_format](raw_text, low_pitch_threshold)

    result = ParseResult(
        measurements=output.measurements,
        confidence=output.confidence,
        detected_format=descriptor.name,
        warnings=list(output.warnings),
        raw_text=raw_text,
    )
    logger.info(
        f"Parsed {descriptor.name} report: {result.measurements.total_squares:.2f} SQ, "
        f"confidence {result.confidence:.0f}%, {len(result.warnings)} warning(s)"
    )
    return result


def parse_pages(pages: Iterable[str], low_pitch_threshold: int = DEFAULT_LOW_PITCH_THRESHOLD) -> ParseResult:
    """Parse a report given as per-page text."""
    return parse_report("\n".join(page or "" for page in pages), low_pitch_threshold)


def create_manual_measurements(
    total_squares: Optional[float] = None,
    total_sq_ft: Optional[float] = None,
    ridge_feet: float = 0.0,
    valley_feet: float = 0.0,
    rake_feet: float = 0.0,
    eave_feet: float = 0.0,
    hip_feet: float = 0.0,
    step_flashing_feet: float = 0.0,
    pitch: Optional[str] = None,
) -> Measurements:
    """
    Build Measurements from manually entered values (when parsing fails).

    Squares take precedence when both area figures are given; the other
    figure is always derived so squares == sq_ft / 100.
    """
    measurements = Measurements(
        ridge_feet=ridge_feet,
        valley_feet=valley_feet,
        rake_feet=rake_feet,
        eave_feet=eave_feet,
        hip_feet=hip_feet,
        step_flashing_feet=step_flashing_feet,
    )

    if total_squares is not None:
        measurements.total_squares = total_squares
        measurements.total_sq_ft = total_squares * 100.0
    elif total_sq_ft is not None:
        measurements.total_sq_ft = total_sq_ft
        measurements.total_squares = total_sq_ft / 100.0

    if pitch:
        measurements.pitch = pitch
        measurements.pitch_multiplier = pitch_to_multiplier(pitch)

    return measurements
