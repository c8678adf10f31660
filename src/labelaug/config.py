# config.py
"""
Augmentation settings.

A config is immutable for the duration of one ``augment`` call. It can be built
directly, from a mapping (snake_case keys or the camelCase keys used by the
control panel), or from a YAML file.
"""
import logging
import math
import os
from dataclasses import asdict, dataclass, fields

import yaml

from .errors import InvalidConfig

logger = logging.getLogger(__name__)

BRIGHTNESS_RANGE = (50.0, 150.0)  # percent
CONTRAST_RANGE = (50.0, 150.0)  # percent
HUE_RANGE = (-180.0, 180.0)  # degrees

# Control panel key -> field name
_KEY_ALIASES = {
    "brightnessPct": "brightness",
    "contrastPct": "contrast",
    "hueDeg": "hue",
    "cropEnabled": "crop",
    "randomCrop": "crop",
    "mosaicEnabled": "mosaic",
}


@dataclass(frozen=True)
class AugmentationConfig:
    flip: bool = False
    brightness: float = 100.0
    contrast: float = 100.0
    hue: float = 0.0
    crop: bool = False
    mosaic: bool = False

    def validate(self):
        """Raises InvalidConfig if any setting is out of range. Returns self."""
        for name in ("flip", "crop", "mosaic"):
            if not isinstance(getattr(self, name), bool):
                raise InvalidConfig(f"{name} must be true or false, got {getattr(self, name)!r}", field=name)
        _check_range("brightness", self.brightness, BRIGHTNESS_RANGE)
        _check_range("contrast", self.contrast, CONTRAST_RANGE)
        _check_range("hue", self.hue, HUE_RANGE)
        return self

    @property
    def is_photometric_identity(self):
        return self.brightness == 100 and self.contrast == 100 and self.hue == 0

    @classmethod
    def from_dict(cls, data):
        """
        Builds a validated config from a mapping.

        Args:
            data (dict): Settings keyed by field name or control panel name
                         (e.g. 'brightnessPct', 'mosaicEnabled').

        Returns:
            AugmentationConfig: The validated config.

        Raises:
            InvalidConfig: On unknown keys, conflicting keys or bad values.
        """
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise InvalidConfig(f"Augmentation settings must be a mapping, got {type(data).__name__}")

        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            name = _KEY_ALIASES.get(key, key)
            if name not in known:
                raise InvalidConfig(f"Unknown augmentation setting '{key}'", field=key)
            if name in values and values[name] != value:
                raise InvalidConfig(f"Conflicting values given for '{name}'", field=name)
            values[name] = value

        for name in ("brightness", "contrast", "hue"):
            if name in values:
                values[name] = _as_number(name, values[name])
        return cls(**values).validate()

    def to_dict(self):
        return asdict(self)

    def reset(self):
        """Neutral settings: no flip, crop or mosaic, 100% levels, 0 hue."""
        return DEFAULT_CONFIG


def _as_number(name, value):
    if isinstance(value, bool):
        raise InvalidConfig(f"{name} must be a number, got {value!r}", field=name)
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise InvalidConfig(f"{name} must be a number, got {value!r}", field=name) from e


def _check_range(name, value, bounds):
    lo, hi = bounds
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidConfig(f"{name} must be a number, got {value!r}", field=name)
    if not math.isfinite(value) or not lo <= value <= hi:
        raise InvalidConfig(f"{name} must be within [{lo:g}, {hi:g}], got {value!r}", field=name)


def load_config(path):
    """
    Loads settings from a YAML file.

    The settings may sit at the top level or under an ``augmentation:`` key.
    An empty file gives the default config.
    """
    if not os.path.exists(path):
        raise InvalidConfig(f"Config file not found: {path}")
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise InvalidConfig(f"Could not parse YAML config {path}: {e}") from e

    if isinstance(data, dict) and "augmentation" in data:
        data = data["augmentation"]
    config = AugmentationConfig.from_dict(data)
    logger.debug("Loaded augmentation config from %s: %s", path, config)
    return config


DEFAULT_CONFIG = AugmentationConfig()
