"""
Roof Takeoff Data Models
Canonical measurement record, parse result, material line items and the
caller-owned order record that recalculation reads from.
"""

import re
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Dict, List, Optional, Any


# =============================================================================
# Material categories (display order for grouped output)
# =============================================================================

CATEGORY_SHINGLES = "Shingles"
CATEGORY_UNDERLAYMENT = "Underlayment"
CATEGORY_STARTER = "Starter"
CATEGORY_RIDGE_CAP = "Ridge Cap"
CATEGORY_VENTILATION = "Ventilation"
CATEGORY_FLASHING = "Flashing"
CATEGORY_ICE_WATER = "Ice & Water"
CATEGORY_NAILS = "Nails"
CATEGORY_ACCESSORIES = "Accessories"

CATEGORY_ORDER = [
    CATEGORY_SHINGLES,
    CATEGORY_UNDERLAYMENT,
    CATEGORY_STARTER,
    CATEGORY_RIDGE_CAP,
    CATEGORY_VENTILATION,
    CATEGORY_FLASHING,
    CATEGORY_ICE_WATER,
    CATEGORY_NAILS,
    CATEGORY_ACCESSORIES,
]

_PITCH_RE = re.compile(r'^\s*(\d+)\s*/\s*12\s*$')


class LinearField(Enum):
    """Linear-feet fields of a Measurements record."""
    RIDGE = "ridge_feet"
    VALLEY = "valley_feet"
    RAKE = "rake_feet"
    EAVE = "eave_feet"
    HIP = "hip_feet"
    STEP_FLASHING = "step_flashing_feet"
    TRANSITION = "transition_feet"

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").lower()


@dataclass
class PitchArea:
    """Square footage of roof surface at a single pitch."""
    pitch: str      # "N/12"
    sq_ft: float

    @property
    def squares(self) -> float:
        return self.sq_ft / 100.0

    @property
    def rise(self) -> int:
        match = _PITCH_RE.match(self.pitch)
        return int(match.group(1)) if match else 0


@dataclass
class Measurements:
    """
    Canonical roof measurement record.

    total_squares and total_sq_ft are always set together by the same
    source event (parser, manual entry) so that squares == sq_ft / 100.
    """
    total_squares: float = 0.0
    total_sq_ft: float = 0.0
    ridge_feet: float = 0.0
    valley_feet: float = 0.0
    rake_feet: float = 0.0
    eave_feet: float = 0.0
    hip_feet: float = 0.0
    step_flashing_feet: float = 0.0
    transition_feet: float = 0.0
    pitch: Optional[str] = None
    pitch_multiplier: float = 1.0
    pitch_breakdown: List[PitchArea] = field(default_factory=list)
    low_pitch_sq_ft: float = 0.0
    low_pitch_areas: List[str] = field(default_factory=list)
    transition_descriptions: List[str] = field(default_factory=list)

    @property
    def has_data(self) -> bool:
        """True once any field has been populated."""
        numeric = (
            self.total_squares, self.total_sq_ft, self.low_pitch_sq_ft,
            *(self.linear_feet(f) for f in LinearField),
        )
        return (
            any(value > 0 for value in numeric)
            or self.pitch is not None
            or bool(self.pitch_breakdown)
            or bool(self.low_pitch_areas)
            or bool(self.transition_descriptions)
        )

    def linear_feet(self, linear_field: LinearField) -> float:
        return getattr(self, linear_field.value)

    def set_linear_feet(self, linear_field: LinearField, value: float) -> None:
        setattr(self, linear_field.value, float(value))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Measurements':
        """Rebuild a record persisted with to_dict()."""
        values = dict(data)
        values["pitch_breakdown"] = [
            PitchArea(**area) for area in values.get("pitch_breakdown", [])
        ]
        return cls(**values)


@dataclass
class ParseResult:
    """Output of parsing one measurement report."""
    measurements: Measurements
    confidence: float               # 0-100
    detected_format: Optional[str]
    warnings: List[str] = field(default_factory=list)
    raw_text: str = ""

    @property
    def is_successful(self) -> bool:
        return self.confidence > 0 and self.measurements.has_data

    def needs_verification(self, threshold: float) -> bool:
        """Low-confidence results should be checked against the source report."""
        return self.confidence < threshold

    def to_dict(self, include_raw_text: bool = False) -> Dict[str, Any]:
        data = {
            "measurements": self.measurements.to_dict(),
            "confidence": self.confidence,
            "detected_format": self.detected_format,
            "warnings": list(self.warnings),
            "is_successful": self.is_successful,
        }
        if include_raw_text:
            data["raw_text"] = self.raw_text
        return data


@dataclass
class JobOptions:
    """Per-order choices that are not part of the roof geometry."""
    shingle_type: str = "GAF Timberline HDZ"
    shingle_color: str = "Charcoal"
    has_spray_foam_insulation: bool = False
    chimney_count: int = 0
    chimney_against_brick: bool = False
    chimney_width_feet: float = 3.0
    chimney_needs_cricket: bool = False
    wall_flashing_against_brick: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class MaterialLineItem:
    """A single line of the material order."""
    name: str
    description: str
    calculated_quantity: float
    unit: str
    category: str
    notes: str = ""
    manual_quantity: Optional[float] = None

    @property
    def quantity(self) -> float:
        """Effective quantity: the manual override if one was set."""
        if self.manual_quantity is not None:
            return self.manual_quantity
        return self.calculated_quantity

    @property
    def is_manually_adjusted(self) -> bool:
        return self.manual_quantity is not None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["quantity"] = self.quantity
        data["is_manually_adjusted"] = self.is_manually_adjusted
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MaterialLineItem':
        """Rebuild an item persisted with to_dict(); derived keys are ignored."""
        values = {k: v for k, v in data.items() if k not in ("quantity", "is_manually_adjusted")}
        return cls(**values)


class OrderStatus(Enum):
    DRAFT = "draft"
    ORDERED = "ordered"
    DELIVERED = "delivered"
    COMPLETED = "completed"


@dataclass
class RoofOrder:
    """
    A roof material order as persisted by the caller.

    The core never stores orders; it only reads one to recalculate its
    materials or to render the supplier email.
    """
    project_name: str = ""
    address: str = ""
    client_name: str = ""
    notes: str = ""
    supplier_email: str = ""
    status: OrderStatus = OrderStatus.DRAFT
    measurements: Measurements = field(default_factory=Measurements)
    materials: List[MaterialLineItem] = field(default_factory=list)
    job_options: JobOptions = field(default_factory=JobOptions)
    preset_id: Optional[str] = None
    preset_name: Optional[str] = None
    parse_confidence: float = 0.0
    detected_format: Optional[str] = None

    def update_material_quantity(self, index: int, quantity: Optional[float]) -> None:
        """Set (or clear, with None) the manual quantity of one line."""
        self.materials[index].manual_quantity = quantity

    def reset_all_to_calculated(self) -> None:
        for item in self.materials:
            item.manual_quantity = None

    def needs_verification(self, threshold: float) -> bool:
        return self.parse_confidence < threshold

    def materials_by_category(self) -> Dict[str, List[MaterialLineItem]]:
        """Group materials by category, keeping first-seen category order."""
        grouped: Dict[str, List[MaterialLineItem]] = {}
        for item in self.materials:
            grouped.setdefault(item.category, []).append(item)
        return grouped
