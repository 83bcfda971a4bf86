# Roof measurement parsing and material calculation
from .models import (
    Measurements,
    PitchArea,
    ParseResult,
    JobOptions,
    MaterialLineItem,
    RoofOrder,
    OrderStatus,
    LinearField,
    CATEGORY_ORDER,
)
from .format_detector import ReportFormat, FormatDescriptor, FORMATS, detect_format
from .report_parser import parse_report, parse_pages, create_manual_measurements
from .config_factors import (
    ConfigFactors,
    Settings,
    Preset,
    BUILT_IN_PRESETS,
    find_preset,
    resolve_factors,
    load_config,
    load_settings,
)
from .material_calculator import calculate_materials
from .recalculation import recalculate, preserve_overrides
from .order_email import generate_email_subject, generate_email_body

__all__ = [
    "Measurements",
    "PitchArea",
    "ParseResult",
    "JobOptions",
    "MaterialLineItem",
    "RoofOrder",
    "OrderStatus",
    "LinearField",
    "CATEGORY_ORDER",
    "ReportFormat",
    "FormatDescriptor",
    "FORMATS",
    "detect_format",
    "parse_report",
    "parse_pages",
    "create_manual_measurements",
    "ConfigFactors",
    "Settings",
    "Preset",
    "BUILT_IN_PRESETS",
    "find_preset",
    "resolve_factors",
    "load_config",
    "load_settings",
    "calculate_materials",
    "recalculate",
    "preserve_overrides",
    "generate_email_subject",
    "generate_email_body",
]
