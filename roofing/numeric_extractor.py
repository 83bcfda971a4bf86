"""
Numeric Extraction Primitives

Pattern-matching helpers shared by every vendor parser: numbers under
ranked label patterns, feet-and-inches tokens, roof pitch, and the
pitch-to-area multiplier.

Vendor reports put the same quantity under different labels and
punctuation, so each helper takes an ordered list of candidate patterns
and returns the first one that yields a usable value.
"""

import logging
import math
import re
from typing import Iterable, List, Optional, Sequence

logger = logging.getLogger(__name__)

_FLAGS = re.IGNORECASE | re.MULTILINE

# A number with optional thousands separators and decimals: 5,855.54
NUMBER = r'(\d[\d,]*(?:\.\d+)?)'

# Square-feet unit suffixes ("sqft", "sq ft", "sq. ft.", "square feet")
SQFT_UNIT = r'(?:sqft|sq\.?\s*ft\.?|square\s*feet)'

# Roofing squares: "SQ" as a whole token, never the start of "sq ft" on the same line
SQUARES_UNIT = r'SQ(?![ \t]*\.?[ \t]*(?:ft|feet)\b)(?![a-z])'

# Straight and curly quote glyphs seen in extracted report text
FEET_MARKS = ("'", "’", "‘", "′")
INCH_MARKS = ('"', "”", "“", "″", "''", "’’")

# Field separators between a label and its value
_LABEL_SEPARATOR = r'[\s:=\-]*'

# Explicitly labelled pitch forms, most specific first
PITCH_LABEL_PATTERNS = [
    r'Predominant\s*Pitch\s*[:=]?\s*(\d{1,2})\s*[/:]\s*12(?!\d)',
    r'(?<![\d/])(\d{1,2})\s*/\s*12\s*pitch',
    r'(?<!\w)pitch\s*[:=]\s*(\d{1,2})\s*[/:]\s*12(?!\d)',
]

# Bare pitch tokens; the guards keep dates like 3/12/2024 out
BARE_PITCH_SLASH = r'(?<![\d/])(\d{1,2})\s*/\s*12(?![\d/])'
BARE_PITCH_COLON = r'(?<![\d:])(\d{1,2})\s*:\s*12(?![\d:])'

PITCH_PATTERNS = PITCH_LABEL_PATTERNS + [BARE_PITCH_SLASH, BARE_PITCH_COLON]

MAX_SUPPORTED_RISE = 12


def parse_number(value: Optional[str]) -> Optional[float]:
    """Parse '5,855.54' -> 5855.54; None if not numeric."""
    if value is None:
        return None
    cleaned = value.replace(',', '').strip()
    if not cleaned:
        return None
    try:
        return float(cleaned)
    except ValueError:
        return None


def _search(pattern: str, text: str) -> Optional[re.Match]:
    try:
        return re.search(pattern, text, _FLAGS)
    except re.error as e:
        logger.debug(f"Skipping invalid pattern {pattern!r}: {e}")
        return None


def extract_number(text: str, patterns: Sequence[str]) -> Optional[float]:
    """
    Return the first number captured by the given patterns.

    Patterns are tried in order; for each, only the first match in the
    text is considered. Group 1 must hold the number. A pattern whose
    capture is not numeric falls through to the next pattern.

    Args:
        text: Extracted report text
        patterns: Ordered regular expressions, most specific first

    Returns:
        Parsed float with thousands separators removed, or None
    """
    for pattern in patterns:
        match = _search(pattern, text)
        if not match:
            continue
        value = parse_number(match.group(1))
        if value is not None:
            return value
    return None


def _alternation(marks: Iterable[str]) -> str:
    # Longest glyphs first so '' wins over '
    ordered = sorted(set(marks), key=len, reverse=True)
    return '(?:' + '|'.join(re.escape(m) for m in ordered) + ')'


def feet_inches_patterns(
    label: str,
    feet_marks: Sequence[str] = FEET_MARKS,
    inch_marks: Sequence[str] = INCH_MARKS,
) -> List[str]:
    """Build the feet-and-inches patterns for a field label (a regex)."""
    feet = _alternation(feet_marks)
    inch = _alternation(inch_marks)
    label_re = rf'(?<![/\w]){label}'
    return [
        rf'{label_re}{_LABEL_SEPARATOR}(\d[\d,]*)\s*{feet}\s*(\d{{1,2}}(?:\.\d+)?)\s*{inch}',
        rf'{label_re}{_LABEL_SEPARATOR}(\d[\d,]*)\s*(?:ft|feet)\.?\s*(\d{{1,2}}(?:\.\d+)?)\s*(?:in|inches)\b',
    ]


def feet_only_pattern(label: str, feet_marks: Sequence[str] = FEET_MARKS) -> str:
    feet = _alternation(feet_marks)
    return rf'(?<![/\w]){label}{_LABEL_SEPARATOR}{NUMBER}\s*(?:{feet}|(?:ft|feet)\b)'


def decimal_feet_pattern(label: str) -> str:
    """'Ridges = 65.5 ft', 'Valley: 40 LF'."""
    return rf'(?<![/\w]){label}{_LABEL_SEPARATOR}{NUMBER}\s*(?:ft|feet|LF|linear)\b'


def extract_feet_inches(
    text: str,
    label: str,
    feet_marks: Sequence[str] = FEET_MARKS,
    inch_marks: Sequence[str] = INCH_MARKS,
) -> Optional[float]:
    """
    Extract a feet-and-inches measurement following a label.

    Handles "Ridge\\n166'10\\"", "Ridge: 133' 10\\"", curly-quote variants
    and "Ridge 12 ft 6 in". Falls back to a feet-only token ("Ridge 45'"
    or "Ridge 45 ft") when no inches are present.

    Args:
        text: Extracted report text
        label: Field label as a regular expression (e.g. r"Ridges?")
        feet_marks: Glyphs accepted as the feet mark
        inch_marks: Glyphs accepted as the inch mark

    Returns:
        Decimal feet (F + I/12), or None if no token follows the label
    """
    for pattern in feet_inches_patterns(label, feet_marks, inch_marks):
        match = _search(pattern, text)
        if not match:
            continue
        feet = parse_number(match.group(1))
        inches = parse_number(match.group(2))
        if feet is None:
            continue
        return feet + (inches or 0.0) / 12.0

    match = _search(feet_only_pattern(label, feet_marks), text)
    if match:
        return parse_number(match.group(1))
    return None


def extract_pitch(text: str, patterns: Sequence[str] = PITCH_PATTERNS) -> Optional[str]:
    """Find a roof pitch ("6/12", "6:12", "6/12 pitch") and normalize to "N/12"."""
    rise = extract_number(text, patterns)
    if rise is None:
        return None
    return f"{int(rise)}/12"


def extract_labeled_pitch(text: str) -> Optional[str]:
    """Pitch stated under an explicit label, ignoring bare N/12 tokens."""
    return extract_pitch(text, PITCH_LABEL_PATTERNS)


def extract_pitch_rises(text: str) -> List[int]:
    """Distinct pitch numerators (0-12), "N/12" or "N:12", in order of first appearance."""
    matches = [
        match
        for pattern in (BARE_PITCH_SLASH, BARE_PITCH_COLON)
        for match in re.finditer(pattern, text, _FLAGS)
    ]
    rises: List[int] = []
    for match in sorted(matches, key=lambda m: m.start()):
        rise = int(match.group(1))
        if rise <= MAX_SUPPORTED_RISE and rise not in rises:
            rises.append(rise)
    return rises


def pitch_to_multiplier(pitch: Optional[str]) -> float:
    """
    Area-correction factor for a pitch: sqrt(rise^2 + 12^2) / 12.

    Returns 1.0 for anything that is not an "N/12" string.
    """
    if not pitch:
        return 1.0
    match = re.fullmatch(r'\s*(\d+(?:\.\d+)?)\s*/\s*12\s*', pitch)
    if not match:
        return 1.0
    rise = float(match.group(1))
    return math.sqrt(rise ** 2 + 144) / 12.0
