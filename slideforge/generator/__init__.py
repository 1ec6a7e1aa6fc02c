"""Presentation rendering package — view model, PPTX and PDF exporters.

Modules:
    viewer: SlideView model shared by the UI and raster capture
    markdown: Minimal markdown flattening
    pptx_builder: PPTX deck export
    raster: Paginated PDF export from captured frames
"""

from .markdown import TextRun, parse_markdown
from .pptx_builder import THANK_YOU_SLIDE, DeckBuilder, build_deck
from .raster import RasterExporter, RasterResult, SlideRasterizer
from .viewer import SlideView, ViewMode, render_deck, render_slide

__all__ = [
    "DeckBuilder",
    "RasterExporter",
    "RasterResult",
    "SlideRasterizer",
    "SlideView",
    "THANK_YOU_SLIDE",
    "TextRun",
    "ViewMode",
    "build_deck",
    "parse_markdown",
    "render_deck",
    "render_slide",
]
