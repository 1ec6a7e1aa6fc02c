"""Runtime settings — image host, canvas and export dimensions.

Settings are plain dataclass values with YAML round-trip, in the same style
as the document loader.  Environment variables override file values:

    SLIDEFORGE_IMAGE_HOST      placeholder image host (default picsum.photos)
    SLIDEFORGE_FETCH_TIMEOUT   image fetch timeout in seconds
"""

import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path

import yaml


@dataclass
class Settings:
    """Tunable values shared by the normalizer and the exporters."""
    image_host: str = "picsum.photos"
    image_width: int = 1280
    image_height: int = 720
    fetch_timeout: float = 20.0

    # Raster export canvas (16:9) and capture scale
    canvas_width: int = 1280
    canvas_height: int = 720
    capture_scale: int = 2

    # PPTX export dimensions
    deck_width_inches: float = 13.333
    deck_height_inches: float = 7.5

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "Settings":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in d.items() if k in known})


_ENV_OVERRIDES = {
    "SLIDEFORGE_IMAGE_HOST": ("image_host", str),
    "SLIDEFORGE_FETCH_TIMEOUT": ("fetch_timeout", float),
}


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from an optional YAML file, then apply env overrides."""
    data: dict = {}
    if path is not None:
        with open(Path(path)) as f:
            data = yaml.safe_load(f) or {}
    for env_name, (attr, cast) in _ENV_OVERRIDES.items():
        raw = os.environ.get(env_name)
        if raw:
            data[attr] = cast(raw)
    return Settings.from_dict(data)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Process-wide settings, loaded lazily from the environment."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def set_settings(settings: Settings | None) -> None:
    """Replace (or reset, with None) the process-wide settings."""
    global _settings
    _settings = settings
