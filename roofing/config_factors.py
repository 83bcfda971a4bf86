"""
Calculation factors, presets and settings.

ConfigFactors is the immutable coefficient bag the material calculator
reads. It comes either from a named Preset or, 1:1, from the shop's
mutable Settings; a preset always wins when one is supplied.

Settings are loaded from YAML:

    settings:
      bundles_per_square: 3
      shingle_waste_factor: 0.10
      ...
    presets:
      - id: steep-slope
        name: Steep Slope
        description: Extra waste for cut-up roofs
        factors:
          shingle_waste_factor: 0.18
"""

import json
import logging
import os
import re
from dataclasses import dataclass, field, fields, asdict, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

SETTINGS_ENV_VAR = "ROOF_TAKEOFF_SETTINGS"

DEFAULT_SEARCH_PATHS = [
    Path(__file__).parent.parent / 'config' / 'roof_settings.yaml',
    Path.home() / '.roof_takeoff' / 'settings.yaml',
]


@dataclass(frozen=True)
class ConfigFactors:
    """Per-job-independent calculation coefficients (fractions, not percents)."""
    bundles_per_square: float = 3.0
    shingle_waste_factor: float = 0.10
    underlayment_sqft_per_roll: float = 1000.0
    underlayment_waste_factor: float = 0.10
    starter_strip_lf_per_bundle: float = 120.0
    ridge_cap_lf_per_bundle: float = 25.0
    drip_edge_lf_per_piece: float = 10.0
    drip_edge_waste_factor: float = 0.10
    valley_waste_factor: float = 0.10
    ice_water_sqft_per_roll: float = 200.0
    ice_water_width_feet: float = 3.0
    eave_ice_water_width_feet: float = 3.0
    requires_ice_water_for_valleys: bool = True
    requires_ice_water_for_low_pitch: bool = True
    requires_ice_water_for_transitions: bool = True
    requires_ice_water_for_eaves: bool = False
    includes_ridge_cap: bool = True
    includes_drip_edge: bool = True

    @classmethod
    def empty(cls) -> 'ConfigFactors':
        """All coefficients zero and all flags off; gates every ratio-based rule."""
        values = {}
        for f in fields(cls):
            values[f.name] = False if f.type in (bool, 'bool') else 0.0
        return cls(**values)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base: Optional['ConfigFactors'] = None) -> 'ConfigFactors':
        """Overlay a mapping of factor values onto base (defaults if None)."""
        _check_keys(data, _FACTOR_NAMES, "factor")
        return replace(base or cls(), **data)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


_FACTOR_NAMES = frozenset(f.name for f in fields(ConfigFactors))


@dataclass
class Settings:
    """Mutable shop-wide defaults; converted 1:1 into ConfigFactors."""
    bundles_per_square: float = 3.0
    shingle_waste_factor: float = 0.10
    underlayment_sqft_per_roll: float = 1000.0
    underlayment_waste_factor: float = 0.10
    starter_strip_lf_per_bundle: float = 120.0
    ridge_cap_lf_per_bundle: float = 25.0
    drip_edge_lf_per_piece: float = 10.0
    drip_edge_waste_factor: float = 0.10
    valley_waste_factor: float = 0.10
    ice_water_sqft_per_roll: float = 200.0
    ice_water_width_feet: float = 3.0
    eave_ice_water_width_feet: float = 3.0
    auto_add_ice_water_for_valleys: bool = True
    auto_add_ice_water_for_low_pitch: bool = True
    auto_add_ice_water_for_transitions: bool = True
    auto_add_ice_water_for_eaves: bool = False
    include_ridge_cap: bool = True
    auto_add_drip_edge: bool = True
    parse_confidence_threshold: float = 80.0

    def to_factors(self) -> ConfigFactors:
        return ConfigFactors(
            bundles_per_square=self.bundles_per_square,
            shingle_waste_factor=self.shingle_waste_factor,
            underlayment_sqft_per_roll=self.underlayment_sqft_per_roll,
            underlayment_waste_factor=self.underlayment_waste_factor,
            starter_strip_lf_per_bundle=self.starter_strip_lf_per_bundle,
            ridge_cap_lf_per_bundle=self.ridge_cap_lf_per_bundle,
            drip_edge_lf_per_piece=self.drip_edge_lf_per_piece,
            drip_edge_waste_factor=self.drip_edge_waste_factor,
            valley_waste_factor=self.valley_waste_factor,
            ice_water_sqft_per_roll=self.ice_water_sqft_per_roll,
            ice_water_width_feet=self.ice_water_width_feet,
            eave_ice_water_width_feet=self.eave_ice_water_width_feet,
            requires_ice_water_for_valleys=self.auto_add_ice_water_for_valleys,
            requires_ice_water_for_low_pitch=self.auto_add_ice_water_for_low_pitch,
            requires_ice_water_for_transitions=self.auto_add_ice_water_for_transitions,
            requires_ice_water_for_eaves=self.auto_add_ice_water_for_eaves,
            includes_ridge_cap=self.include_ridge_cap,
            includes_drip_edge=self.auto_add_drip_edge,
        )


_SETTINGS_NAMES = frozenset(f.name for f in fields(Settings))


@dataclass(frozen=True)
class Preset:
    """Named, immutable factor template."""
    id: str
    name: str
    description: str = ""
    factors: ConfigFactors = field(default_factory=ConfigFactors)
    is_built_in: bool = False


BUILT_IN_PRESETS: List[Preset] = [
    Preset(
        id="standard",
        name="Standard Residential",
        description="10% waste, ice & water in valleys, low-pitch areas and transitions",
        factors=ConfigFactors(),
        is_built_in=True,
    ),
    Preset(
        id="complex",
        name="Complex Roof",
        description="15% waste for cut-up roofs with many hips and valleys",
        factors=ConfigFactors(
            shingle_waste_factor=0.15,
            underlayment_waste_factor=0.15,
            drip_edge_waste_factor=0.15,
            valley_waste_factor=0.15,
        ),
        is_built_in=True,
    ),
    Preset(
        id="cold-climate",
        name="Cold Climate",
        description="Adds 6' of ice & water shield along the eaves",
        factors=ConfigFactors(
            requires_ice_water_for_eaves=True,
            eave_ice_water_width_feet=6.0,
        ),
        is_built_in=True,
    ),
]


@dataclass
class RoofConfig:
    """Everything read from a settings file."""
    settings: Settings = field(default_factory=Settings)
    presets: List[Preset] = field(default_factory=list)
    source: Optional[str] = None


def _check_keys(data: Dict[str, Any], allowed: frozenset, kind: str) -> None:
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise ValueError(f"Unknown {kind} key(s): {', '.join(unknown)}")


def _slugify(name: str) -> str:
    slug = re.sub(r'[^a-z0-9]+', '-', name.lower()).strip('-')
    return slug or "preset"


def resolve_factors(settings: Settings, preset: Optional[Preset] = None) -> ConfigFactors:
    """Factors for a calculation: the preset's if given, else the settings'."""
    if preset is not None:
        return preset.factors
    return settings.to_factors()


def find_preset(name_or_id: str, presets: Optional[List[Preset]] = None) -> Optional[Preset]:
    """
    Look up a preset by id or (case-insensitive) name.

    Custom presets are searched before the built-in ones.
    """
    wanted = name_or_id.strip().lower()
    for preset in list(presets or []) + BUILT_IN_PRESETS:
        if preset.id.lower() == wanted or preset.name.lower() == wanted:
            return preset
    return None


def duplicate_preset(preset: Preset) -> Preset:
    """Editable copy of a preset (built-in or not)."""
    return Preset(
        id=f"{preset.id}-copy",
        name=f"{preset.name} (Copy)",
        description=preset.description,
        factors=preset.factors,
        is_built_in=False,
    )


def preset_to_dict(preset: Preset) -> Dict[str, Any]:
    return {
        "id": preset.id,
        "name": preset.name,
        "description": preset.description,
        "factors": preset.factors.to_dict(),
    }


def preset_from_dict(data: Dict[str, Any]) -> Preset:
    """Build a custom preset; missing factors take the standard defaults."""
    if not isinstance(data, dict):
        raise ValueError("Preset must be a mapping")
    _check_keys(data, frozenset({"id", "name", "description", "factors", "is_built_in"}), "preset")
    name = data.get("name")
    if not name:
        raise ValueError("Preset is missing a name")
    return Preset(
        id=data.get("id") or _slugify(name),
        name=name,
        description=data.get("description") or "",
        factors=ConfigFactors.from_dict(data.get("factors") or {}),
        is_built_in=False,
    )


def preset_to_json(preset: Preset) -> str:
    """Export a preset for sharing."""
    return json.dumps(preset_to_dict(preset), indent=2)


def preset_from_json(payload: str) -> Preset:
    """
    Import a shared preset. Imported presets are never built-in.

    Raises:
        ValueError: malformed JSON or unknown keys
    """
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid preset JSON: {e}") from e
    return preset_from_dict(data)


def _find_config_file(config_path: Optional[str]) -> Optional[Path]:
    if config_path is None:
        config_path = os.environ.get(SETTINGS_ENV_VAR) or None

    if config_path is not None:
        path = Path(config_path).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"Settings file not found: {path}")
        return path

    for path in DEFAULT_SEARCH_PATHS:
        if path.exists():
            return path
    return None


def load_config(config_path: Optional[str] = None) -> RoofConfig:
    """
    Load settings and custom presets from YAML.

    Args:
        config_path: Path to a settings file. If None, uses the
            ROOF_TAKEOFF_SETTINGS environment variable, then the default
            locations; with no file anywhere, the defaults apply.

    Returns:
        RoofConfig

    Raises:
        FileNotFoundError: an explicitly named file does not exist
        ValueError: the file contains unknown keys or malformed values
    """
    path = _find_config_file(config_path)
    if path is None:
        logger.debug("No settings file found, using defaults")
        return RoofConfig()

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"Settings file {path} must contain a mapping")
    _check_keys(raw, frozenset({"settings", "presets"}), "top-level")

    settings_data = raw.get("settings") or {}
    _check_keys(settings_data, _SETTINGS_NAMES, "settings")
    settings = Settings(**settings_data)

    presets = [preset_from_dict(item) for item in raw.get("presets") or []]

    logger.info(f"Loaded settings from {path} ({len(presets)} custom preset(s))")
    return RoofConfig(settings=settings, presets=presets, source=str(path))


def load_settings(config_path: Optional[str] = None) -> Settings:
    return load_config(config_path).settings
