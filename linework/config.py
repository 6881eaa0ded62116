"""
Configuration Module

Reconstruction settings and per-layer specs, loadable from a YAML file.

Example settings.yaml:

    reconstruction:
      min_precision: 0.01
      tolerance_policy: euclidean
      collinearity: normalize
    layers:
      MURS:
        type: BearingWall
        expect_closed: true
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .constants import (
    MIN_PRECISION,
    DEFAULT_TOLERANCE_POLICY,
    DEFAULT_LAYER_TYPES,
    DEFAULT_CLOSED_LAYERS,
    CollinearityStrategy,
)
from .diagnostics import ConfigError
from .graph.tolerance import TolerancePolicy, make_tolerance

logger = logging.getLogger(__name__)


@dataclass
class LayerSpec:
    """How one drawing layer is labelled and judged."""
    name: str
    feature_type: Optional[str] = None
    expect_closed: bool = False


@dataclass
class ReconstructionConfig:
    """Configuration for segment-to-path reconstruction."""
    min_precision: float = MIN_PRECISION
    tolerance_policy: str = DEFAULT_TOLERANCE_POLICY
    collinearity: CollinearityStrategy = CollinearityStrategy.NORMALIZE
    layers: Dict[str, LayerSpec] = field(default_factory=dict)

    def __post_init__(self):
        try:
            self.collinearity = CollinearityStrategy.from_string(self.collinearity)
        except ValueError:
            raise ConfigError(f"Unknown collinearity strategy: {self.collinearity}")

        if self.min_precision is None or float(self.min_precision) <= 0:
            raise ConfigError(f"min_precision must be positive: {self.min_precision}")
        self.min_precision = float(self.min_precision)

    @property
    def alignment_tiebreak(self) -> bool:
        return self.collinearity == CollinearityStrategy.TIEBREAK

    def tolerance(self) -> TolerancePolicy:
        """Build the tolerance policy for one layer invocation."""
        return make_tolerance(self.tolerance_policy, self.min_precision)

    def layer_spec(self, layer: str) -> LayerSpec:
        """Spec for a layer, or a bare spec when the layer is not configured."""
        return self.layers.get(layer) or LayerSpec(name=layer)

    @classmethod
    def with_default_layers(cls, **kwargs) -> "ReconstructionConfig":
        """Config selecting the default wall layers."""
        layers = {
            name: LayerSpec(
                name=name,
                feature_type=feature_type,
                expect_closed=name in DEFAULT_CLOSED_LAYERS,
            )
            for name, feature_type in DEFAULT_LAYER_TYPES.items()
        }
        return cls(layers=layers, **kwargs)


def parse_layers(section: Any) -> Dict[str, LayerSpec]:
    """
    Parse the `layers` section of a settings mapping.

    Accepts either a mapping of name -> {type, expect_closed} (or name ->
    type string), or a list of layer names.
    """
    if section is None:
        return {}

    layers: Dict[str, LayerSpec] = {}

    if isinstance(section, list):
        for name in section:
            layers[str(name)] = LayerSpec(name=str(name))
        return layers

    if not isinstance(section, dict):
        raise ConfigError(f"'layers' must be a mapping or a list, got {type(section).__name__}")

    for name, value in section.items():
        name = str(name)
        if value is None:
            layers[name] = LayerSpec(name=name)
        elif isinstance(value, str):
            layers[name] = LayerSpec(name=name, feature_type=value)
        elif isinstance(value, dict):
            layers[name] = LayerSpec(
                name=name,
                feature_type=value.get("type"),
                expect_closed=bool(value.get("expect_closed", False)),
            )
        else:
            raise ConfigError(f"Invalid settings for layer '{name}': {value!r}")

    return layers


def config_from_dict(data: Optional[Dict[str, Any]]) -> ReconstructionConfig:
    """Build a ReconstructionConfig from a settings mapping."""
    data = data or {}
    if not isinstance(data, dict):
        raise ConfigError("Settings must be a mapping")

    section = data.get("reconstruction") or {}
    config = ReconstructionConfig(
        min_precision=section.get("min_precision", MIN_PRECISION),
        tolerance_policy=section.get("tolerance_policy", DEFAULT_TOLERANCE_POLICY),
        collinearity=section.get("collinearity"),
        layers=parse_layers(data.get("layers")),
    )

    # Fail early on unknown policy names
    config.tolerance()
    return config


def load_config(path) -> ReconstructionConfig:
    """
    Load reconstruction settings from a YAML file.

    Args:
        path: Path to settings.yaml

    Returns:
        ReconstructionConfig

    Raises:
        ConfigError: If the file is missing, unparsable or has invalid values
    """
    settings_path = Path(path)
    if not settings_path.exists():
        raise ConfigError(f"Settings file not found: {path}")

    try:
        with open(settings_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Cannot parse settings file {path}: {e}")

    config = config_from_dict(data)
    logger.info(
        f"Loaded settings: {path} (precision={config.min_precision}, "
        f"collinearity={config.collinearity.value}, {len(config.layers)} layers)"
    )
    return config
