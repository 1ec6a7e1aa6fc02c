"""Layout resolver — decides where text and image sit on a slide.

All geometry is expressed as fractions of the 16:9 canvas so the same
placement can be scaled to inches (PPTX) or pixels (raster capture).

Usage::

    from slideforge.schema.layout import resolve_layout
    from slideforge.schema.themes import get_theme

    placement = resolve_layout(slide, get_theme("vibrant"))
    placement.image.to_inches(13.333, 7.5)
"""

from dataclasses import dataclass

from .models import Slide, SlideLayout
from .themes import Theme


@dataclass(frozen=True)
class Box:
    """A rectangle in canvas fractions (0.0 - 1.0)."""
    left: float
    top: float
    width: float
    height: float

    def scaled(self, width: float, height: float) -> tuple[float, float, float, float]:
        """Return (left, top, width, height) in the units of the canvas given."""
        return (
            self.left * width,
            self.top * height,
            self.width * width,
            self.height * height,
        )

    def to_inches(self, width_in: float, height_in: float) -> tuple[float, float, float, float]:
        return self.scaled(width_in, height_in)

    def to_pixels(self, width_px: int, height_px: int) -> tuple[int, int, int, int]:
        return tuple(round(v) for v in self.scaled(width_px, height_px))


@dataclass(frozen=True)
class Placement:
    """Resolved geometry for one slide."""
    layout: SlideLayout
    title: Box
    content: Box
    image: Box | None = None
    overlay: Box | None = None           # Translucent panel behind text
    image_is_background: bool = False
    image_ready: bool = False            # False -> reserved pane renders empty
    split: float | None = None           # Image share of the width for side layouts

    @property
    def has_image_pane(self) -> bool:
        return self.image is not None


# ---------------------------------------------------------------------------
# Geometry table
# ---------------------------------------------------------------------------

_MARGIN = 0.05
_TITLE_TOP = 0.09
_TITLE_HEIGHT = 0.18
_CONTENT_TOP = 0.27
_CONTENT_HEIGHT = 0.66
_PANE_TOP = 0.15
_PANE_HEIGHT = 0.70
_SPLIT = 0.5


def _text_column(left: float, width: float) -> tuple[Box, Box]:
    return (
        Box(left, _TITLE_TOP, width, _TITLE_HEIGHT),
        Box(left, _CONTENT_TOP, width, _CONTENT_HEIGHT),
    )


def _text_only() -> Placement:
    title, content = _text_column(_MARGIN, 1 - 2 * _MARGIN)
    return Placement(SlideLayout.TEXT_ONLY, title, content)


def _side_image(layout: SlideLayout, image_ready: bool) -> Placement:
    pane_width = _SPLIT - _MARGIN
    if layout is SlideLayout.IMAGE_LEFT:
        image = Box(_MARGIN, _PANE_TOP, pane_width, _PANE_HEIGHT)
        title, content = _text_column(_SPLIT + _MARGIN, pane_width - _MARGIN)
    else:
        image = Box(_SPLIT, _PANE_TOP, pane_width, _PANE_HEIGHT)
        title, content = _text_column(_MARGIN, pane_width - _MARGIN)
    return Placement(layout, title, content, image=image,
                     image_ready=image_ready, split=_SPLIT)


def _background_image(image_ready: bool) -> Placement:
    return Placement(
        SlideLayout.BACKGROUND_IMAGE,
        title=Box(0.10, 0.20, 0.80, 0.15),
        content=Box(0.10, 0.35, 0.80, 0.45),
        image=Box(0.0, 0.0, 1.0, 1.0),
        overlay=Box(_MARGIN, _PANE_TOP, 1 - 2 * _MARGIN, _PANE_HEIGHT),
        image_is_background=True,
        image_ready=image_ready,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def effective_layout(slide: Slide, theme: Theme) -> SlideLayout:
    """The slide's own layout, else the theme default."""
    return slide.layout or theme.default_layout


def resolve_layout(slide: Slide, theme: Theme) -> Placement:
    """Resolve the placement for a slide under a theme.

    Image layouts keep their pane even when the slide has no image url yet;
    ``image_ready`` tells the renderer whether there is anything to draw.
    """
    layout = effective_layout(slide, theme)
    image_ready = bool(slide.image and slide.image.url)

    if layout is SlideLayout.BACKGROUND_IMAGE:
        return _background_image(image_ready)
    if layout in (SlideLayout.IMAGE_LEFT, SlideLayout.IMAGE_RIGHT):
        return _side_image(layout, image_ready)
    return _text_only()
