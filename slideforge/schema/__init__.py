"""Presentation schema package — typed document model, themes and layouts.

Provides the contract between the normalizer, the view model and the
exporters:

- models.py: Core dataclasses (PresentationData, Slide, SlideImage)
- themes.py: The canonical theme table
- layout.py: Layout resolution into canvas-relative geometry
- loader.py: JSON/YAML serialization
"""

from .layout import Box, Placement, effective_layout, resolve_layout
from .loader import default_filename, load_document, save_document
from .models import (
    DEFAULT_FONT_SIZE,
    MAX_FONT_SIZE,
    MIN_FONT_SIZE,
    PresentationData,
    Slide,
    SlideImage,
    SlideLayout,
    SlideTheme,
)
from .themes import THEMES, Theme, get_theme, hex_to_rgb_tuple, theme_options

__all__ = [
    # Models
    "PresentationData",
    "Slide",
    "SlideImage",
    "SlideLayout",
    "SlideTheme",
    "DEFAULT_FONT_SIZE",
    "MAX_FONT_SIZE",
    "MIN_FONT_SIZE",
    # Themes
    "THEMES",
    "Theme",
    "get_theme",
    "hex_to_rgb_tuple",
    "theme_options",
    # Layout
    "Box",
    "Placement",
    "effective_layout",
    "resolve_layout",
    # Loader
    "default_filename",
    "load_document",
    "save_document",
]
