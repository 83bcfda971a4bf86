"""
Roof Material Calculator

Turns Measurements + ConfigFactors + JobOptions into the supplier order
line items. Pure and deterministic: the same inputs always produce the
same items, notes included, in the same order.

Rule order (also the display order within a category):
    1. Shingles              10. Sealant
    2. Underlayment          11. Pipe boots
    3. Starter strip         12. Step flashing
    4. Ridge cap             13. Angle flashing
    5. Ridge vent            14. Counter flashing (brick walls)
    6. Drip edge / apron     15. Chimney package
    7. Ice & water shield    16. Touch-up paint
    8. Coil nails            17. Zipper boot
    9. Cap nails
"""

import logging
import math
from dataclasses import dataclass
from typing import Callable, List, Optional

from .config_factors import ConfigFactors
from .models import (
    CATEGORY_ACCESSORIES,
    CATEGORY_FLASHING,
    CATEGORY_ICE_WATER,
    CATEGORY_NAILS,
    CATEGORY_RIDGE_CAP,
    CATEGORY_SHINGLES,
    CATEGORY_STARTER,
    CATEGORY_UNDERLAYMENT,
    CATEGORY_VENTILATION,
    JobOptions,
    MaterialLineItem,
    Measurements,
)

logger = logging.getLogger(__name__)

# Fixed product constants
STARTER_WASTE = 1.05
RIDGE_CAP_WASTE = 1.05
RIDGE_VENT_SECTION_FEET = 4.0
ICE_WATER_ROLL_LENGTH_FEET = 66.7
ICE_WATER_WASTE = 1.10
SQUARES_PER_COIL_NAIL_BOX = 16.0
SQUARES_PER_CAP_NAIL_PAIL = 20.0
SQUARES_PER_PIPE_BOOT = 20.0
MIN_PIPE_BOOTS = 2
MAX_PIPE_BOOTS = 6
STEP_FLASHING_PIECES_PER_LF = 2.0
STEP_FLASHING_PIECES_PER_BUNDLE = 100.0
FLASHING_PIECE_FEET = 10.0
CHIMNEY_STEP_FLASHING_LF = 12.0
CHIMNEY_DEPTH_FEET = 2.0


@dataclass
class _Job:
    """Inputs shared by every rule."""
    m: Measurements
    f: ConfigFactors
    options: JobOptions

    @property
    def color(self) -> str:
        return (self.options.shingle_color or "").strip().upper()

    def with_color(self, base: str, suffix: str = "") -> str:
        parts = [base, self.color, suffix]
        return " ".join(p for p in parts if p)


def _ceil(value: float) -> float:
    return float(math.ceil(value))


def _percent(fraction: float) -> int:
    return int(round(fraction * 100))


def ice_water_area_sq_ft(m: Measurements, f: ConfigFactors) -> float:
    """
    Area covered by ice & water shield, where no felt is laid.

    Eave strips count only when requires_ice_water_for_eaves is set.
    """
    area = 0.0
    if f.requires_ice_water_for_valleys and m.valley_feet > 0:
        area += m.valley_feet * f.ice_water_width_feet * 2
    if f.requires_ice_water_for_low_pitch and m.low_pitch_sq_ft > 0:
        area += m.low_pitch_sq_ft
    if f.requires_ice_water_for_transitions and m.transition_feet > 0:
        area += m.transition_feet * f.ice_water_width_feet * 2
    if f.requires_ice_water_for_eaves and m.eave_feet > 0:
        area += m.eave_feet * f.eave_ice_water_width_feet
    return area


# =============================================================================
# Rules
# =============================================================================

def _shingles(job: _Job) -> List[MaterialLineItem]:
    m, f = job.m, job.f
    if not (f.bundles_per_square > 0 and m.total_squares > 0):
        return []

    squares_with_waste = m.total_squares * (1.0 + f.shingle_waste_factor)
    bundles = math.ceil(squares_with_waste * f.bundles_per_square)

    notes = (
        f"{m.total_squares:.1f} SQ + {_percent(f.shingle_waste_factor)}% waste = "
        f"{squares_with_waste:.1f} SQ × {f.bundles_per_square:g} = {bundles} bundles"
    )
    if m.pitch:
        notes += f" ({m.pitch} pitch)"
    if m.transition_descriptions:
        notes += " [Multi-pitch]"

    return [MaterialLineItem(
        name=job.with_color("GAF SG TIMB HDZ", "3/S"),
        description=f"{job.options.shingle_type} - {f.bundles_per_square:g} bundles per square",
        calculated_quantity=float(bundles),
        unit="bundles",
        category=CATEGORY_SHINGLES,
        notes=notes,
    )]


def _underlayment(job: _Job) -> List[MaterialLineItem]:
    m, f = job.m, job.f
    if not (m.total_squares > 0 and f.underlayment_sqft_per_roll > 0):
        return []

    ice_water_sq_ft = ice_water_area_sq_ft(m, f)
    felt_sq_ft = max(0.0, m.total_squares * 100 - ice_water_sq_ft)
    sq_ft_needed = felt_sq_ft * (1.0 + f.underlayment_waste_factor)

    notes = f"{sq_ft_needed:.0f} sqft coverage needed"
    if ice_water_sq_ft > 0:
        notes += f" (excludes {ice_water_sq_ft:.0f} sqft ice & water areas)"

    return [MaterialLineItem(
        name="GAF FELTBUSTER SYN ROOF FELT 10SQ",
        description=f"{f.underlayment_sqft_per_roll:.0f} sqft per roll",
        calculated_quantity=_ceil(sq_ft_needed / f.underlayment_sqft_per_roll),
        unit="rolls",
        category=CATEGORY_UNDERLAYMENT,
        notes=notes,
    )]


def _starter(job: _Job) -> List[MaterialLineItem]:
    m, f = job.m, job.f
    starter_lf = m.eave_feet + m.rake_feet
    if not (starter_lf > 0 and f.starter_strip_lf_per_bundle > 0):
        return []

    return [MaterialLineItem(
        name="GAF PRO-START STARTER 120.33LF",
        description=f"{f.starter_strip_lf_per_bundle:.0f} LF per bundle",
        calculated_quantity=_ceil(starter_lf * STARTER_WASTE / f.starter_strip_lf_per_bundle),
        unit="bundles",
        category=CATEGORY_STARTER,
        notes=f"{starter_lf:.0f} LF (eaves + rakes)",
    )]


def _ridge_cap(job: _Job) -> List[MaterialLineItem]:
    m, f = job.m, job.f
    ridge_hip_lf = m.ridge_feet + m.hip_feet
    if not (f.includes_ridge_cap and ridge_hip_lf > 0 and f.ridge_cap_lf_per_bundle > 0):
        return []

    return [MaterialLineItem(
        name=job.with_color("GAF SG S-A-R", "25LF"),
        description=f"{f.ridge_cap_lf_per_bundle:.0f} LF per bundle",
        calculated_quantity=_ceil(ridge_hip_lf * RIDGE_CAP_WASTE / f.ridge_cap_lf_per_bundle),
        unit="bundles",
        category=CATEGORY_RIDGE_CAP,
        notes=f"{ridge_hip_lf:.0f} LF (ridge + hip)",
    )]


def _ridge_vent(job: _Job) -> List[MaterialLineItem]:
    m = job.m
    # Spray-foamed (conditioned) attics are not vented
    if not (m.ridge_feet > 0 and not job.options.has_spray_foam_insulation):
        return []

    return [MaterialLineItem(
        name='GAF COBRA RIGID VENT 3 12" W/NAILS',
        description="4' sections with nails",
        calculated_quantity=_ceil(m.ridge_feet / RIDGE_VENT_SECTION_FEET),
        unit="pieces",
        category=CATEGORY_VENTILATION,
        notes=f"{m.ridge_feet:.0f} LF ridge",
    )]


def _drip_edge(job: _Job) -> List[MaterialLineItem]:
    m, f = job.m, job.f
    if not (f.includes_drip_edge and f.drip_edge_lf_per_piece > 0):
        return []

    waste = 1.0 + f.drip_edge_waste_factor
    items = []
    if m.rake_feet > 0:
        items.append(MaterialLineItem(
            name="ALUM 1-1/2X3-3/4 OF DRIP EDGE BLACK",
            description=f"1-1/2x3-3/4\" x {f.drip_edge_lf_per_piece:g}' pieces",
            calculated_quantity=_ceil(m.rake_feet * waste / f.drip_edge_lf_per_piece),
            unit="pieces",
            category=CATEGORY_FLASHING,
            notes=f"{m.rake_feet:.0f} LF rakes",
        ))
    if m.eave_feet > 0:
        items.append(MaterialLineItem(
            name='ALUM GUTTER APRON 2.0" BLACK',
            description=f"AGA20BK - {f.drip_edge_lf_per_piece:g}' pieces for eaves",
            calculated_quantity=_ceil(m.eave_feet * waste / f.drip_edge_lf_per_piece),
            unit="pieces",
            category=CATEGORY_FLASHING,
            notes=f"{m.eave_feet:.0f} LF eaves",
        ))
    return items


def _ice_water(job: _Job) -> List[MaterialLineItem]:
    """
    Valleys, transitions and eaves are covered along their length (66.7'
    per roll); low-pitch areas by square footage. Contributions are summed
    in roll units before the 10% waste and rounding.

    Valleys, low pitch and transitions are the standard contributions.
    Eave coverage is an optional extra, off unless
    requires_ice_water_for_eaves is set (the cold-climate preset sets it);
    it also feeds the underlayment exclusion through ice_water_area_sq_ft.
    """
    m, f = job.m, job.f
    rolls = 0.0
    notes = []

    if f.requires_ice_water_for_valleys and m.valley_feet > 0:
        rolls += m.valley_feet / ICE_WATER_ROLL_LENGTH_FEET
        notes.append(f"{m.valley_feet:.0f} LF valleys")

    if f.requires_ice_water_for_transitions and m.transition_feet > 0:
        rolls += m.transition_feet / ICE_WATER_ROLL_LENGTH_FEET
        notes.append(f"{m.transition_feet:.0f} LF transitions")

    if f.requires_ice_water_for_low_pitch and m.low_pitch_sq_ft > 0 and f.ice_water_sqft_per_roll > 0:
        rolls += m.low_pitch_sq_ft / f.ice_water_sqft_per_roll
        notes.append(f"{m.low_pitch_sq_ft:.0f} sqft low-pitch")

    if f.requires_ice_water_for_eaves and m.eave_feet > 0:
        rolls += m.eave_feet / ICE_WATER_ROLL_LENGTH_FEET
        notes.append(f"{m.eave_feet:.0f} LF eaves")

    if rolls <= 0:
        return []

    return [MaterialLineItem(
        name="GAF WEATHERWATCH 36\"X66.7' 2SQ/RL",
        description='66.7 LF per roll (36" wide)',
        calculated_quantity=_ceil(rolls * ICE_WATER_WASTE),
        unit="rolls",
        category=CATEGORY_ICE_WATER,
        notes=", ".join(notes),
    )]


def _nails(job: _Job) -> List[MaterialLineItem]:
    m = job.m
    if m.total_squares <= 0:
        return []

    return [
        MaterialLineItem(
            name='COIL NAIL ABC 1-1/4" EG',
            description="Electro-galvanized for shingles",
            calculated_quantity=max(_ceil(m.total_squares / SQUARES_PER_COIL_NAIL_BOX), 1.0),
            unit="boxes",
            category=CATEGORY_NAILS,
            notes="1 box per 16 squares",
        ),
        MaterialLineItem(
            name='NAIL ABC PLASTIC CAP 1" 3M/PAIL',
            description="For underlayment installation",
            calculated_quantity=max(_ceil(m.total_squares / SQUARES_PER_CAP_NAIL_PAIL), 1.0),
            unit="pails",
            category=CATEGORY_NAILS,
            notes="3M nails per pail",
        ),
    ]


def _sealant(job: _Job) -> List[MaterialLineItem]:
    return [MaterialLineItem(
        name="MH JTS1 JOINT/TERM SEALNT 10OZ BLK",
        description="10oz tubes for flashings",
        calculated_quantity=2.0,
        unit="tubes",
        category=CATEGORY_ACCESSORIES,
        notes="2 tubes per job",
    )]


def _pipe_boots(job: _Job) -> List[MaterialLineItem]:
    m = job.m
    if m.total_squares <= 0:
        return []

    estimate = math.ceil(m.total_squares / SQUARES_PER_PIPE_BOOT)
    return [MaterialLineItem(
        name="IPS 4N1 HARDBASE FLASHING",
        description="4-in-1 hardbase for plumbing vents",
        calculated_quantity=float(max(MIN_PIPE_BOOTS, min(MAX_PIPE_BOOTS, estimate))),
        unit="pieces",
        category=CATEGORY_FLASHING,
        notes="Estimate ~1 per 20 sq - verify on site",
    )]


def _wall_flashing(job: _Job) -> List[MaterialLineItem]:
    m = job.m
    lf = m.step_flashing_feet
    if lf <= 0:
        return []

    items = [
        MaterialLineItem(
            name="ALUM PB STEP FLASH 8X8 BLACK 100/BD",
            description="100 pieces per bundle",
            calculated_quantity=_ceil(lf * STEP_FLASHING_PIECES_PER_LF / STEP_FLASHING_PIECES_PER_BUNDLE),
            unit="bundles",
            category=CATEGORY_FLASHING,
            notes=f"{lf:.0f} LF step flashing",
        ),
        MaterialLineItem(
            name="GALV ANGLE FLASHING 4X4X10",
            description="Galvanized for wall termination",
            calculated_quantity=_ceil(lf / FLASHING_PIECE_FEET),
            unit="pieces",
            category=CATEGORY_FLASHING,
            notes=f"{lf:.0f} LF coverage",
        ),
    ]
    if job.options.wall_flashing_against_brick:
        items.append(MaterialLineItem(
            name="GALV COUNTER FLASHING 4X4X10",
            description="For brick/masonry wall termination",
            calculated_quantity=_ceil(lf / FLASHING_PIECE_FEET),
            unit="pieces",
            category=CATEGORY_FLASHING,
            notes=f"Counter flashing for {lf:.0f} LF of masonry wall",
        ))
    return items


def _chimneys(job: _Job) -> List[MaterialLineItem]:
    options = job.options
    count = options.chimney_count
    if count <= 0:
        return []

    width = options.chimney_width_feet
    step_pieces = count * CHIMNEY_STEP_FLASHING_LF * STEP_FLASHING_PIECES_PER_LF
    items = [
        MaterialLineItem(
            name="ALUM PB STEP FLASH 8X8 BLACK 100/BD",
            description="Chimney step flashing",
            calculated_quantity=_ceil(step_pieces / STEP_FLASHING_PIECES_PER_BUNDLE),
            unit="bundles",
            category=CATEGORY_FLASHING,
            notes=f"{count} chimney(s) × 12 LF each",
        ),
        MaterialLineItem(
            name="GALV L FLASHING 4X4X10",
            description="Chimney apron/front flashing",
            calculated_quantity=max(1.0, _ceil(count * width / FLASHING_PIECE_FEET)),
            unit="pieces",
            category=CATEGORY_FLASHING,
            notes=f"{count} chimney(s) × {width:.0f}' width",
        ),
    ]

    if options.chimney_needs_cricket:
        items.append(MaterialLineItem(
            name="2X4X8 LUMBER",
            description="Cricket framing",
            calculated_quantity=float(count * 2),
            unit="pieces",
            category=CATEGORY_FLASHING,
            notes=f"{count} chimney(s) × 2 boards each",
        ))
        items.append(MaterialLineItem(
            name="OSB BOARD 7/16\" 4'X8'",
            description="Cricket decking",
            calculated_quantity=float(count),
            unit="sheets",
            category=CATEGORY_FLASHING,
            notes=f"{count} chimney(s) - cricket deck",
        ))

    if options.chimney_against_brick:
        perimeter = 2 * (width + CHIMNEY_DEPTH_FEET)
        items.append(MaterialLineItem(
            name="GALV COUNTER FLASHING 4X4X10",
            description="For brick chimney masonry reglet",
            calculated_quantity=_ceil(count * perimeter / FLASHING_PIECE_FEET),
            unit="pieces",
            category=CATEGORY_FLASHING,
            notes=f"{count} brick chimney(s) - perimeter counter flash",
        ))

    return items


def _paint(job: _Job) -> List[MaterialLineItem]:
    return [MaterialLineItem(
        name=job.with_color("PAINT ABC ROOF ACCES"),
        description="Touch-up for flashings/vents",
        calculated_quantity=1.0,
        unit="cans",
        category=CATEGORY_ACCESSORIES,
        notes="1 can per job",
    )]


def _zipper_boot(job: _Job) -> List[MaterialLineItem]:
    return [MaterialLineItem(
        name="Zipper Boot",
        description="Roof penetration boot",
        calculated_quantity=1.0,
        unit="pieces",
        category=CATEGORY_FLASHING,
        notes="1 per job",
    )]


RULES: List[Callable[[_Job], List[MaterialLineItem]]] = [
    _shingles,
    _underlayment,
    _starter,
    _ridge_cap,
    _ridge_vent,
    _drip_edge,
    _ice_water,
    _nails,
    _sealant,
    _pipe_boots,
    _wall_flashing,
    _chimneys,
    _paint,
    _zipper_boot,
]


def calculate_materials(
    measurements: Measurements,
    factors: ConfigFactors,
    job_options: Optional[JobOptions] = None,
) -> List[MaterialLineItem]:
    """
    Calculate the material order for a roof.

    Every rule is gated on its own preconditions; a rule whose inputs are
    zero (or whose factor ratio has a zero divisor) simply contributes no
    line. Nothing here raises for missing data.

    Args:
        measurements: Parsed or manually entered roof measurements
        factors: Resolved calculation factors
        job_options: Per-order options (defaults if None)

    Returns:
        Fresh list of MaterialLineItem in rule order
    """
    job = _Job(m=measurements, f=factors, options=job_options or JobOptions())

    materials: List[MaterialLineItem] = []
    for rule in RULES:
        materials.extend(rule(job))

    logger.debug(f"Calculated {len(materials)} material lines for {measurements.total_squares:.2f} SQ")
    return materials
