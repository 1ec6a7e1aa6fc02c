"""Slide view model — what the interactive viewer and raster capture draw.

Combines a slide with the active theme and its resolved layout into a flat
``SlideView``.  The editable on-screen UI binds to these views; the raster
exporter paints them.  Theme values and geometry come from the shared
theme table and layout resolver, the same ones the PPTX exporter uses.
"""

from dataclasses import dataclass
from enum import Enum

from slideforge.generator.markdown import TextRun, parse_markdown
from slideforge.schema.layout import Placement, resolve_layout
from slideforge.schema.models import PresentationData, Slide
from slideforge.schema.themes import Theme

TITLE_SIZE_PT = 28
OPENING_TITLE_SIZE_PT = 44


class ViewMode(Enum):
    """How the viewer is currently displaying slides."""
    PREVIEW = "preview"      # One slide at a time, full size
    GRID = "grid"            # Thumbnail grid
    CONTENT = "content"      # Text editing view, no rendered frames

    @property
    def frame_scale(self) -> float:
        """Size of a rendered frame relative to the full canvas."""
        return 0.5 if self is ViewMode.GRID else 1.0


@dataclass
class SlideView:
    """A slide resolved against a theme, ready to draw."""
    index: int
    title: str
    runs: list[TextRun]
    placement: Placement
    background_color: str
    title_color: str
    content_color: str
    title_font: str
    content_font: str
    title_size_pt: int
    font_size_pt: int
    image_url: str | None = None
    overlay_color: str | None = None
    overlay_opacity: float = 0.0
    speaker_notes: str | None = None
    mode: ViewMode = ViewMode.PREVIEW

    @property
    def draws_image(self) -> bool:
        return self.placement.has_image_pane and self.placement.image_ready


def render_slide(slide: Slide, theme: Theme, index: int = 0,
                 mode: ViewMode = ViewMode.PREVIEW) -> SlideView:
    """Resolve one slide into a SlideView."""
    placement = resolve_layout(slide, theme)
    image_url = slide.image.url if slide.image and slide.image.url else None
    overlay = placement.overlay is not None
    return SlideView(
        index=index,
        title=slide.title,
        runs=parse_markdown(slide.content),
        placement=placement,
        background_color=theme.background_color,
        title_color=theme.title_color,
        content_color=theme.content_color,
        title_font=theme.title_font,
        content_font=theme.content_font,
        title_size_pt=TITLE_SIZE_PT,
        font_size_pt=slide.render_font_size,
        image_url=image_url if placement.has_image_pane else None,
        overlay_color=theme.overlay_color if overlay else None,
        overlay_opacity=theme.overlay_opacity if overlay else 0.0,
        speaker_notes=slide.speaker_notes,
        mode=mode,
    )


def render_deck(document: PresentationData, theme: Theme,
                mode: ViewMode = ViewMode.PREVIEW) -> list[SlideView]:
    """Resolve every slide of a document, in order."""
    return [render_slide(s, theme, i, mode) for i, s in enumerate(document.slides)]
