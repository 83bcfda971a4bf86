"""
Tests for Low-Pitch Analysis

Tests low-pitch area totals, transition detection and the pitch-by-area
breakdown join.
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from roofing.models import Measurements, PitchArea
from roofing.low_pitch import (
    analyze_low_pitch,
    extract_pitch_breakdown,
    dominant_pitch,
    low_pitch_from_breakdown,
)


class TestAnalyzeLowPitch:
    """Tests for low-pitch area detection."""

    def test_area_pitch_form(self):
        """Only areas under the threshold are summed."""
        text = "Area 1 Pitch 2/12: 500 sqft\nArea 2 Pitch 8/12: 1,500 sqft"
        analysis = analyze_low_pitch(text)
        assert analysis.low_pitch_sq_ft == 500.0
        assert analysis.low_pitch_areas == ["Area 1 2/12: 500 sqft"]

    def test_span_counted_once(self):
        """The looser bare form does not recount a 'Pitch' match."""
        analysis = analyze_low_pitch("Pitch 3/12: 400 sqft")
        assert analysis.low_pitch_sq_ft == 400.0
        assert analysis.low_pitch_areas == ["3/12: 400 sqft"]

    def test_threshold_is_strict(self):
        text = "4/12: 300 sqft"
        assert analyze_low_pitch(text).low_pitch_sq_ft == 0.0
        assert analyze_low_pitch(text, threshold=5).low_pitch_sq_ft == 300.0

    def test_flat_counts_as_low_pitch(self):
        assert analyze_low_pitch("0/12: 250 sqft").low_pitch_sq_ft == 250.0

    def test_no_areas(self):
        analysis = analyze_low_pitch("Ridge: 40 ft")
        assert analysis.low_pitch_sq_ft == 0.0
        assert analysis.low_pitch_areas == []

    def test_explicit_transition_wins(self):
        """A measured transition suppresses the inferred descriptors."""
        text = "Transitions: 25'6\"\nArea 1 Pitch 3/12: 400 sqft\nArea 2 Pitch 8/12: 900 sqft"
        analysis = analyze_low_pitch(text)
        assert analysis.transition_feet == pytest.approx(25.5)
        assert analysis.transition_descriptions == []

    def test_decimal_transition(self):
        analysis = analyze_low_pitch("Transition: 18.5 ft")
        assert analysis.transition_feet == pytest.approx(18.5)

    def test_inferred_transitions_from_distinct_pitches(self):
        """Heuristic: adjacent sorted pitches are paired, not measured."""
        text = "Main 8/12\nPorch 2/12\nGarage 5/12\nShed 8/12"
        analysis = analyze_low_pitch(text)
        assert analysis.transition_feet == 0.0
        assert analysis.transition_descriptions == ["2/12 to 5/12", "5/12 to 8/12"]

    def test_inferred_transitions_from_colon_pitches(self):
        analysis = analyze_low_pitch("Main 8:12\nGarage 5:12")
        assert analysis.transition_descriptions == ["5/12 to 8/12"]

    def test_single_pitch_has_no_transition(self):
        assert analyze_low_pitch("Pitch 6/12").transition_descriptions == []

    def test_apply_to_measurements(self):
        m = Measurements()
        analyze_low_pitch("Area 1 Pitch 2/12: 500 sqft\nArea 2 Pitch 8/12: 1,500 sqft").apply_to(m)
        assert m.low_pitch_sq_ft == 500.0
        assert m.transition_descriptions == ["2/12 to 8/12"]


class TestPitchBreakdown:
    """Tests for the two-stream area-index join (heuristic)."""

    BREAKDOWN_TEXT = (
        "Area 1: 6/12\n"
        "Area 2: 4/12\n"
        "Area 3: 6/12\n"
        "Area 5: 7/12\n"
        "Area 1: 1,000 sqft\n"
        "Area 2: 250 sqft\n"
        "Area 3: 500 sqft\n"
        "Area 4: 9,000 sqft\n"
        "Area 5: 50 sqft\n"
    )

    def test_join_sums_by_pitch(self):
        breakdown = extract_pitch_breakdown(self.BREAKDOWN_TEXT)
        assert breakdown == [PitchArea("4/12", 250.0), PitchArea("6/12", 1500.0)]

    def test_implausible_facets_dropped(self):
        """Area 4 has no pitch and area 5 is below the facet window."""
        pitches = [a.pitch for a in extract_pitch_breakdown(self.BREAKDOWN_TEXT)]
        assert "7/12" not in pitches

    def test_first_seen_value_wins(self):
        text = "Area 1: 3/12\nArea 1: 9/12\nArea 1: 800 sqft\nArea 1: 1,600 sqft"
        assert extract_pitch_breakdown(text) == [PitchArea("3/12", 800.0)]

    def test_empty_text(self):
        assert extract_pitch_breakdown("") == []

    def test_dominant_pitch(self):
        breakdown = extract_pitch_breakdown(self.BREAKDOWN_TEXT)
        assert dominant_pitch(breakdown) == "6/12"

    def test_dominant_pitch_tie_keeps_first(self):
        breakdown = [PitchArea("4/12", 500.0), PitchArea("6/12", 500.0)]
        assert dominant_pitch(breakdown) == "4/12"

    def test_dominant_pitch_empty(self):
        assert dominant_pitch([]) is None

    def test_low_pitch_from_breakdown(self):
        breakdown = [PitchArea("2/12", 300.0), PitchArea("4/12", 250.0), PitchArea("6/12", 900.0)]
        total, descriptions = low_pitch_from_breakdown(breakdown)
        assert total == 300.0
        assert descriptions == ["2/12: 300 sqft"]
