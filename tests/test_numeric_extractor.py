"""
Tests for Numeric Extraction Primitives

Tests number parsing, feet-inches tokens, pitch normalization and the
pitch multiplier.
"""

import math
import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from roofing.numeric_extractor import (
    parse_number, extract_number, extract_feet_inches,
    extract_pitch, extract_labeled_pitch, extract_pitch_rises,
    pitch_to_multiplier,
)


class TestParseNumber:
    """Tests for thousands-separator handling."""

    def test_strips_commas(self):
        assert parse_number("5,855.54") == pytest.approx(5855.54)

    def test_plain_integer(self):
        assert parse_number("42") == 42.0

    def test_not_numeric(self):
        assert parse_number("abc") is None
        assert parse_number(",") is None
        assert parse_number(None) is None


class TestExtractNumber:
    """Tests for ordered pattern matching."""

    def test_first_pattern_wins(self):
        text = "Total Area: 2,000 sqft\nArea: 900 sqft"
        value = extract_number(text, [r'Total\s*Area:\s*([\d,]+)', r'Area:\s*([\d,]+)'])
        assert value == 2000.0

    def test_falls_through_to_later_pattern(self):
        text = "Roof Area: 1,500"
        value = extract_number(text, [r'Total\s*Area:\s*([\d,]+)', r'Roof\s*Area:\s*([\d,]+)'])
        assert value == 1500.0

    def test_case_insensitive(self):
        assert extract_number("RIDGE: 40", [r'ridge:\s*(\d+)']) == 40.0

    def test_no_match(self):
        assert extract_number("nothing here", [r'Ridge:\s*(\d+)']) is None

    def test_invalid_pattern_is_skipped(self):
        assert extract_number("Ridge: 40", [r'(unclosed', r'Ridge:\s*(\d+)']) == 40.0


class TestFeetInches:
    """Tests for F'I\" style measurements."""

    def test_label_on_previous_line(self):
        assert extract_feet_inches("Ridge\n166'10\"", r'Ridges?') == pytest.approx(166 + 10 / 12)

    def test_space_between_feet_and_inches(self):
        assert extract_feet_inches("Rake: 133' 10\"", r'Rakes?') == pytest.approx(133 + 10 / 12)

    def test_curly_quotes(self):
        assert extract_feet_inches("Ridge: 133’ 10”", r'Ridges?') == pytest.approx(133 + 10 / 12)

    def test_ft_in_words(self):
        assert extract_feet_inches("Ridge 12 ft 6 in", r'Ridges?') == pytest.approx(12.5)

    def test_feet_only_fallback(self):
        assert extract_feet_inches("Hip: 45'", r'Hips?') == 45.0
        assert extract_feet_inches("Hip 45 ft", r'Hips?') == 45.0

    def test_label_inside_other_word_is_ignored(self):
        # "Ridge/Hip" must not be read as a hip measurement
        assert extract_feet_inches("Ridge/Hip: 30'0\"", r'Hips?') is None

    def test_missing_label(self):
        assert extract_feet_inches("Valley: 20'0\"", r'Ridges?') is None


class TestPitch:
    """Tests for pitch extraction and normalization."""

    def test_slash_form(self):
        assert extract_pitch("Pitch 6/12") == "6/12"

    def test_colon_form(self):
        assert extract_pitch("Slope 6:12") == "6/12"

    def test_pitch_suffix_form(self):
        assert extract_pitch("8/12 pitch") == "8/12"

    def test_labeled_pitch_preferred_over_bare(self):
        text = "Facet 1 4/12\nPredominant Pitch: 7/12"
        assert extract_pitch(text) == "7/12"
        assert extract_labeled_pitch(text) == "7/12"

    def test_labeled_pitch_ignores_bare_tokens(self):
        assert extract_labeled_pitch("Facet 1 4/12") is None

    def test_date_is_not_a_pitch(self):
        assert extract_pitch("Report date 3/12/2024") is None

    def test_no_pitch(self):
        assert extract_pitch("no slope mentioned") is None

    def test_distinct_rises_in_order(self):
        text = "6/12 main, 3/12 porch, 6/12 garage, 14/12 tower"
        assert extract_pitch_rises(text) == [6, 3]

    def test_colon_rises_counted(self):
        assert extract_pitch_rises("Main 8:12\nPorch 3:12") == [8, 3]

    def test_mixed_forms_in_text_order(self):
        assert extract_pitch_rises("Porch 3:12, main 6/12, garage 6:12") == [3, 6]


class TestPitchMultiplier:
    """Tests for the slope area-correction factor."""

    def test_flat(self):
        assert pitch_to_multiplier("0/12") == 1.0

    def test_twelve_twelve(self):
        assert pitch_to_multiplier("12/12") == pytest.approx(math.sqrt(2))

    def test_six_twelve(self):
        assert pitch_to_multiplier("6/12") == pytest.approx(math.sqrt(180) / 12)

    def test_non_conforming_defaults_to_one(self):
        assert pitch_to_multiplier("steep") == 1.0
        assert pitch_to_multiplier("6/10") == 1.0
        assert pitch_to_multiplier(None) == 1.0
        assert pitch_to_multiplier("") == 1.0
