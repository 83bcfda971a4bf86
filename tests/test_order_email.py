"""
Tests for the supplier order email
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from roofing.models import MaterialLineItem, Measurements, RoofOrder
from roofing.order_email import generate_email_body, generate_email_subject


@pytest.fixture
def order():
    return RoofOrder(
        project_name="Smith Residence",
        address="123 Main St",
        notes="Deliver to driveway",
        measurements=Measurements(total_squares=30.0, total_sq_ft=3000.0),
        materials=[
            MaterialLineItem("Zipper Boot", "", 1, "pieces", "Accessories"),
            MaterialLineItem("GAF SG TIMB HDZ CHARCOAL 3/S", "", 100, "bundles", "Shingles"),
            MaterialLineItem("GAF FELTBUSTER SYN ROOF FELT 10SQ", "", 2.4, "rolls", "Underlayment"),
        ],
    )


class TestEmailSubject:
    """Tests for the subject line."""

    def test_uses_address_and_waste_squares(self, order):
        assert generate_email_subject(order) == "Roof Order - 123 Main St - 33.0 SQ"

    def test_falls_back_to_project_name(self, order):
        order.address = ""
        assert generate_email_subject(order) == "Roof Order - Smith Residence - 33.0 SQ"


class TestEmailBody:
    """Tests for the body text."""

    def test_header(self, order):
        body = generate_email_body(order)
        assert body.startswith("Smith Residence\n123 Main St\n\n33.00 SQ (w/ 10% waste)\n")
        assert "MATERIALS" in body

    def test_items_in_category_order(self, order):
        body = generate_email_body(order)
        shingles = body.index("100 bundles  -  GAF SG TIMB HDZ CHARCOAL 3/S")
        felt = body.index("3 rolls  -  GAF FELTBUSTER SYN ROOF FELT 10SQ")
        boot = body.index("1 pieces  -  Zipper Boot")
        assert shingles < felt < boot

    def test_manual_quantity_starred(self, order):
        order.update_material_quantity(1, 90)
        body = generate_email_body(order)
        assert "90 bundles  -  GAF SG TIMB HDZ CHARCOAL 3/S *" in body
        assert body.endswith("* = adjusted qty")

    def test_no_legend_without_adjustments(self, order):
        assert "adjusted qty" not in generate_email_body(order)

    def test_notes(self, order):
        assert "NOTES" in generate_email_body(order)
        assert "Deliver to driveway" in generate_email_body(order)
        assert "Deliver to driveway" not in generate_email_body(order, include_notes=False)

    def test_empty_notes_omitted(self, order):
        order.notes = ""
        assert "NOTES" not in generate_email_body(order)
