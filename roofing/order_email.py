"""
Supplier order email text.

Plain-text rendering only; sending is up to the caller.
"""

import math

from .models import CATEGORY_ORDER, RoofOrder

WASTE_MULTIPLIER = 1.10
RULE = "────────────────────────"


def generate_email_subject(order: RoofOrder) -> str:
    """'Roof Order - <address or project> - <squares with waste> SQ'."""
    location = order.address or order.project_name
    squares = order.measurements.total_squares * WASTE_MULTIPLIER
    return f"Roof Order - {location} - {squares:.1f} SQ"


def generate_email_body(order: RoofOrder, include_notes: bool = True) -> str:
    """
    Build the supplier email body.

    Materials are grouped by category in the standard category order,
    one line per item with its quantity rounded up. Manually adjusted
    quantities are starred and explained in a legend.
    """
    squares = order.measurements.total_squares * WASTE_MULTIPLIER

    lines = [
        order.project_name or "Roof Order",
        order.address,
        "",
        f"{squares:.2f} SQ (w/ 10% waste)",
        "",
        RULE,
        "MATERIALS",
        RULE,
        "",
    ]
    body = "\n".join(lines) + "\n"

    grouped = order.materials_by_category()
    for category in CATEGORY_ORDER:
        for item in grouped.get(category, []):
            marker = " *" if item.is_manually_adjusted else ""
            body += f"{math.ceil(item.quantity)} {item.unit}  -  {item.name}{marker}\n\n"

    if include_notes and order.notes:
        body += f"{RULE}\nNOTES\n{RULE}\n\n{order.notes}\n\n"

    if any(item.is_manually_adjusted for item in order.materials):
        body += "\n\n* = adjusted qty"

    return body
