"""
Material recalculation with manual-override preservation.
"""

import logging
from typing import List, Optional

from .config_factors import Preset, Settings, resolve_factors
from .material_calculator import calculate_materials
from .models import MaterialLineItem, RoofOrder

logger = logging.getLogger(__name__)


def preserve_overrides(
    existing: List[MaterialLineItem],
    fresh: List[MaterialLineItem],
) -> List[MaterialLineItem]:
    """
    Carry manual quantities from a previous item list onto a fresh one.

    Each manually adjusted item's override lands on the first fresh item
    of the same category. Names are not compared: a color change renames
    the shingle line but it is still the same line. An override whose
    category no longer exists is dropped, so a line that stopped applying
    is never brought back.

    Mutates and returns fresh.
    """
    for item in existing:
        if not item.is_manually_adjusted:
            continue
        target = next((new for new in fresh if new.category == item.category), None)
        if target is None:
            logger.debug(f"Dropping override for {item.category}: line no longer applies")
            continue
        target.manual_quantity = item.manual_quantity
    return fresh


def recalculate(
    order: RoofOrder,
    settings: Settings,
    preset: Optional[Preset] = None,
) -> List[MaterialLineItem]:
    """
    Recompute an order's materials, keeping the user's manual quantities.

    Args:
        order: Existing order (measurements, job options, current materials)
        settings: Shop settings, used when no preset is given
        preset: Preset whose factors take precedence over settings

    Returns:
        New list of MaterialLineItem; the order itself is not modified
    """
    factors = resolve_factors(settings, preset)
    fresh = calculate_materials(order.measurements, factors, order.job_options)
    merged = preserve_overrides(order.materials, fresh)

    kept = sum(1 for item in merged if item.is_manually_adjusted)
    logger.info(f"Recalculated {len(merged)} material lines ({kept} manual override(s) kept)")
    return merged
