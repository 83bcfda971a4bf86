"""
Node 3: Material Calculation
Expands parsed measurements into the supplier material list.
"""

import logging
from typing import Dict, Any

from roofing.config_factors import ConfigFactors
from roofing.material_calculator import calculate_materials
from roofing.models import JobOptions, Measurements

from ..state import RoofTakeoffState

logger = logging.getLogger(__name__)


def calculate_materials_node(state: RoofTakeoffState) -> Dict[str, Any]:
    """
    Calculate materials for the current report.

    Args:
        state: Current workflow state

    Returns:
        State updates with materials, or last_error
    """
    parse_result = state.get("parse_result") or {}

    try:
        measurements = Measurements.from_dict(parse_result.get("measurements", {}))
        factors = ConfigFactors(**state.get("factors", {}))
        job_options = JobOptions(**state.get("job_options", {}))

        items = calculate_materials(measurements, factors, job_options)

    except Exception as e:
        logger.error(f"Material calculation failed: {e}")
        return {"last_error": f"Material calculation failed: {str(e)}", "materials": None}

    logger.info(f"Calculated {len(items)} material lines for {measurements.total_squares:.2f} SQ")

    return {
        "materials": [item.to_dict() for item in items],
        "last_error": None
    }
