"""
Tests for Report Format Detection
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from roofing.format_detector import (
    FORMATS, ReportFormat, descriptor_for, detect_format,
)


class TestIdentifierDetection:
    """Tests for tier-1 keyword matching."""

    @pytest.mark.parametrize("text,expected", [
        ("iRoof Measurement Report", "iRoof"),
        ("Report generated by www.iroof.com", "iRoof"),
        ("EagleView Premium Report", "EagleView"),
        ("Imagery (c) Pictometry", "EagleView"),
        ("HOVER Complete Measurements", "Hover"),
        ("See hover.to for details", "Hover"),
        ("RoofSnap Estimate", "RoofSnap"),
    ])
    def test_identifier(self, text, expected):
        assert detect_format(text).name == expected

    def test_case_insensitive(self):
        assert detect_format("EAGLEVIEW").report_format == ReportFormat.EAGLEVIEW

    def test_declared_order_breaks_ties(self):
        """A report naming two vendors gets the earlier declared one."""
        assert detect_format("HOVER data provided by EagleView").name == "EagleView"

    def test_generic_roof_report_title(self):
        """A plain 'Roof Report' title identifies no vendor."""
        assert detect_format("Roof Report\nnothing else").name == "Generic"


class TestStructuralDetection:
    """Tests for tier-2 heuristics."""

    def test_feet_inches_with_squares_is_iroof(self):
        assert detect_format("Ridge 166'10\"\nTotal 58.56 SQ").name == "iRoof"

    def test_squares_before_word_starting_with_f(self):
        assert detect_format("58.56 SQ\nFlat: none\nRidge: 166'10\"").name == "iRoof"

    def test_feet_inches_with_pitch_areas_is_iroof(self):
        assert detect_format("Ridge 20'6\"\n6/12: 1,200 sqft").name == "iRoof"

    def test_feet_inches_alone_is_not_enough(self):
        assert detect_format("Ridge 166'10\"").name == "Generic"

    def test_total_roof_area_is_eagleview(self):
        assert detect_format("Total Roof Area 2450").name == "EagleView"

    def test_facets_with_sqft_is_eagleview(self):
        assert detect_format("Facet 1: 450 sq ft").name == "EagleView"

    def test_fallback_is_generic(self):
        descriptor = detect_format("hello world")
        assert descriptor is not None
        assert descriptor.report_format == ReportFormat.GENERIC

    def test_empty_text_is_generic(self):
        assert detect_format("").name == "Generic"


class TestDescriptors:
    """Tests for the format table."""

    def test_generic_is_last(self):
        assert FORMATS[-1].report_format == ReportFormat.GENERIC
        assert FORMATS[-1].identifiers == ()

    def test_descriptor_for_every_format(self):
        for report_format in ReportFormat:
            assert descriptor_for(report_format).report_format == report_format
