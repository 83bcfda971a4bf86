"""
Tests for the Roof Report Parser entry point

Covers unit disambiguation, empty input, confidence bounds, determinism
and manual measurement entry.
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from roofing.report_parser import (
    NO_TEXT_WARNING,
    parse_report,
    parse_pages,
    create_manual_measurements,
)


SAMPLE_REPORT = """EagleView Premium Report
Total Roof Area: 2,450 sq ft
Ridges: 65.5 ft
Valleys: 20 ft
Rakes: 88 ft
Eaves: 120.25 ft
Predominant Pitch: 8/12
"""


class TestUnitDisambiguation:
    """Tests for squares vs square feet."""

    def test_squares_only(self):
        m = parse_report("Total Squares 58.56 SQ").measurements
        assert m.total_squares == pytest.approx(58.56)
        assert m.total_sq_ft == pytest.approx(5856.0)

    def test_sqft_only(self):
        m = parse_report("Total Area 5855.54 sqft").measurements
        assert m.total_sq_ft == pytest.approx(5855.54)
        assert m.total_squares == pytest.approx(58.5554)

    def test_sq_ft_is_not_squares(self):
        m = parse_report("Roof measures 2,000 sq ft").measurements
        assert m.total_sq_ft == 2000.0
        assert m.total_squares == pytest.approx(20.0)

    def test_squares_before_word_starting_with_f(self):
        m = parse_report("Total Squares 58.56 SQ\nFacets: 12").measurements
        assert m.total_squares == pytest.approx(58.56)
        assert m.total_sq_ft == pytest.approx(5856.0)

    def test_squares_followed_by_prose(self):
        m = parse_report("Roof is 58.56 SQ for this job").measurements
        assert m.total_squares == pytest.approx(58.56)

    def test_implausible_squares_treated_as_sqft(self):
        m = parse_report("Total Squares 650 SQ").measurements
        assert m.total_sq_ft == pytest.approx(650.0)
        assert m.total_squares == pytest.approx(6.5)

    def test_squares_always_match_sqft(self):
        for text in ("Total Squares 58.56 SQ", "Total Area 5855.54 sqft", SAMPLE_REPORT):
            m = parse_report(text).measurements
            assert m.total_squares == pytest.approx(m.total_sq_ft / 100.0)


class TestEmptyInput:
    """Tests for blank reports."""

    @pytest.mark.parametrize("text", ["", "   \n\t  ", None])
    def test_no_text(self, text):
        result = parse_report(text)
        assert result.confidence == 0.0
        assert result.detected_format is None
        assert result.warnings == [NO_TEXT_WARNING]
        assert not result.is_successful


class TestParseResult:
    """Tests for result packaging."""

    def test_detected_format_and_success(self):
        result = parse_report(SAMPLE_REPORT)
        assert result.detected_format == "EagleView"
        assert result.is_successful
        assert result.raw_text == SAMPLE_REPORT

    def test_confidence_bounds_on_garbage(self):
        garbage = "\x00\xff ''' \"\" 12/12/12 99999999 SQ sqft Area Area 1 :: /12 Ridge: ' Eave \" 0/12: sqft"
        result = parse_report(garbage)
        assert 0.0 <= result.confidence <= 100.0

    def test_deterministic(self):
        first = parse_report(SAMPLE_REPORT).to_dict(include_raw_text=True)
        second = parse_report(SAMPLE_REPORT).to_dict(include_raw_text=True)
        assert first == second

    def test_needs_verification(self):
        result = parse_report("Roof area: 1,800 sqft\nRidge: 40")
        assert result.confidence < 80
        assert result.needs_verification(80)

    def test_low_pitch_threshold_is_passed_through(self):
        text = "EagleView\nTotal Roof Area: 2,000 sq ft\n4/12: 600 sqft"
        assert parse_report(text).measurements.low_pitch_sq_ft == 0.0
        assert parse_report(text, low_pitch_threshold=5).measurements.low_pitch_sq_ft == 600.0

    def test_parse_pages_joins_text(self):
        pages = ["EagleView Premium Report", "Total Roof Area: 2,450 sq ft", None]
        result = parse_pages(pages)
        assert result.detected_format == "EagleView"
        assert result.measurements.total_sq_ft == 2450.0


class TestManualMeasurements:
    """Tests for manually entered values."""

    def test_from_squares(self):
        m = create_manual_measurements(total_squares=30)
        assert m.total_sq_ft == 3000.0

    def test_from_sqft(self):
        m = create_manual_measurements(total_sq_ft=3000)
        assert m.total_squares == 30.0

    def test_squares_take_precedence(self):
        m = create_manual_measurements(total_squares=30, total_sq_ft=1234)
        assert m.total_sq_ft == 3000.0

    def test_pitch_sets_multiplier(self):
        m = create_manual_measurements(total_squares=30, pitch="12/12")
        assert m.pitch == "12/12"
        assert m.pitch_multiplier == pytest.approx(2 ** 0.5)

    def test_linear_fields(self):
        m = create_manual_measurements(total_squares=20, ridge_feet=40, eave_feet=120)
        assert m.ridge_feet == 40
        assert m.eave_feet == 120
        assert m.has_data
