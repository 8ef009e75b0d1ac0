"""
core/config.py

Application configuration: defaults, an optional YAML file, then environment
overrides (FILTERPHOTO_LIBRARY_DIR, FILTERPHOTO_THEME, FILTERPHOTO_FORMAT).

Config file lookup when no path is given:
  $FILTERPHOTO_CONFIG, else $XDG_CONFIG_HOME/filterphoto/config.yaml,
  else ~/.config/filterphoto/config.yaml
"""

import os
from dataclasses import dataclass, field, fields
from typing import Optional

import yaml

from .filter_kinds import DEFAULT_INTENSITY, DEFAULT_KIND, FilterKind

SUPPORTED_FORMATS = ("png", "jpg", "jpeg", "tif", "tiff")

ENV_LIBRARY_DIR = "FILTERPHOTO_LIBRARY_DIR"
ENV_THEME = "FILTERPHOTO_THEME"
ENV_FORMAT = "FILTERPHOTO_FORMAT"
ENV_CONFIG = "FILTERPHOTO_CONFIG"


def _default_library_dir() -> str:
    pictures = os.environ.get("XDG_PICTURES_DIR")
    if pictures:
        return os.path.join(pictures, "FilterPhoto")
    return os.path.join(os.path.expanduser("~"), "Pictures", "FilterPhoto")


def default_config_path() -> str:
    path = os.environ.get(ENV_CONFIG)
    if path:
        return path
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return os.path.join(xdg_config, "filterphoto", "config.yaml")
    return os.path.join(os.path.expanduser("~"), ".config", "filterphoto", "config.yaml")


@dataclass
class AppConfig:
    library_dir: str = field(default_factory=_default_library_dir)
    image_format: str = "png"
    theme: str = "cyborg"
    default_filter: str = DEFAULT_KIND.value
    default_intensity: float = DEFAULT_INTENSITY

    def validate(self) -> "AppConfig":
        """Normalise fields in place; raise ValueError on invalid values."""
        self.image_format = str(self.image_format).lower().lstrip(".")
        if self.image_format not in SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported image_format '{self.image_format}'. Choose one of: {', '.join(SUPPORTED_FORMATS)}."
            )
        self.default_filter = FilterKind.parse(self.default_filter).value
        intensity = float(self.default_intensity)
        if not 0.0 <= intensity <= 1.0:
            raise ValueError("default_intensity must be within [0, 1].")
        self.default_intensity = intensity
        self.library_dir = os.path.expanduser(str(self.library_dir))
        return self

    @property
    def filter_kind(self) -> FilterKind:
        return FilterKind.parse(self.default_filter)

    @classmethod
    def from_yaml(cls, path: str) -> "AppConfig":
        """Load from a YAML file; a missing file gives the defaults."""
        if not os.path.exists(path):
            return cls()
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping.")
        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict) -> "AppConfig":
        config = cls()
        known = {f.name for f in fields(cls)}
        for key, value in data.items():
            if key in known and value is not None:
                setattr(config, key, value)
        return config

    def apply_env(self) -> "AppConfig":
        overrides = {
            "library_dir": os.environ.get(ENV_LIBRARY_DIR),
            "theme": os.environ.get(ENV_THEME),
            "image_format": os.environ.get(ENV_FORMAT),
        }
        for key, value in overrides.items():
            if value:
                setattr(self, key, value)
        return self


def load_config(path: Optional[str] = None) -> AppConfig:
    """Defaults <- YAML file <- environment, then validated."""
    config = AppConfig.from_yaml(path or default_config_path())
    return config.apply_env().validate()
