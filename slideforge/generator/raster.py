"""Raster exporter — captures slide frames into a paginated PDF.

Each slide view is captured as an image on a fixed 16:9 canvas (1280x720 at
2x by default) and the captures become one landscape page each in a single
PDF assembled with Pillow.  Capture runs strictly in slide order.

A failed capture is reported once through ``on_failure`` and skipped; the
remaining slides are still exported.

Usage::

    exporter = RasterExporter(get_theme(document.theme))
    result = exporter.export(document, on_failure=lambda f: print(f.message))
    Path(f"{document.title}.pdf").write_bytes(result.pdf)
"""

import binascii
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from PIL import Image, ImageDraw, ImageFont, ImageOps, UnidentifiedImageError

from slideforge.config import Settings, get_settings
from slideforge.errors import AssetFetchFailure
from slideforge.generator.viewer import SlideView, ViewMode, render_deck
from slideforge.processor.images import decode_data_uri
from slideforge.schema.layout import Box
from slideforge.schema.loader import default_filename
from slideforge.schema.models import PresentationData
from slideforge.schema.themes import Theme, hex_to_rgb_tuple

logger = logging.getLogger(__name__)

Capture = Callable[[SlideView], Image.Image]
FailureHandler = Callable[[AssetFetchFailure], None]

_BULLET_PREFIX = "• "
_LINE_SPACING = 1.25


# ---------------------------------------------------------------------------
# Font helpers
# ---------------------------------------------------------------------------

def _load_font(family: str, size_px: int):
    """Best-effort TrueType lookup by family name, else Pillow's default."""
    for candidate in (f"{family}.ttf", f"{family.replace(' ', '')}.ttf",
                      "DejaVuSans.ttf"):
        try:
            return ImageFont.truetype(candidate, size_px)
        except OSError:
            continue
    return ImageFont.load_default(size=size_px)


def _wrap(draw: ImageDraw.ImageDraw, text: str, font, max_width: int) -> list[str]:
    """Greedy word wrap to a pixel width."""
    lines: list[str] = []
    current = ""
    for word in text.split():
        trial = f"{current} {word}".strip()
        if current and draw.textlength(trial, font=font) > max_width:
            lines.append(current)
            current = word
        else:
            current = trial
    if current:
        lines.append(current)
    return lines


# ---------------------------------------------------------------------------
# SlideRasterizer: default capture
# ---------------------------------------------------------------------------

class SlideRasterizer:
    """Paints a SlideView onto a Pillow image.

    Inline ``data:`` images are drawn; external references leave the image
    pane empty.  Undecodable inline data raises AssetFetchFailure.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    def frame_size(self, mode: ViewMode) -> tuple[int, int]:
        scale = self.settings.capture_scale * mode.frame_scale
        return (round(self.settings.canvas_width * scale),
                round(self.settings.canvas_height * scale))

    def __call__(self, view: SlideView) -> Image.Image:
        width, height = self.frame_size(view.mode)
        frame = Image.new("RGB", (width, height), hex_to_rgb_tuple(view.background_color))
        placement = view.placement

        if view.draws_image and view.image_url:
            self._draw_image(frame, view, placement.image)
        if placement.overlay is not None and view.overlay_color:
            self._draw_overlay(frame, placement.overlay, view.overlay_color,
                               view.overlay_opacity)

        draw = ImageDraw.Draw(frame)
        px_per_pt = width / (self.settings.deck_width_inches * 72)
        title_px = round(view.title_size_pt * px_per_pt)
        self._draw_lines(draw, [view.title], placement.title,
                         _load_font(view.title_font, title_px), title_px,
                         view.title_color, frame.size)
        content_px = round(view.font_size_pt * px_per_pt)
        lines = [(_BULLET_PREFIX + r.text) if r.bullet else r.text for r in view.runs]
        self._draw_lines(draw, lines, placement.content,
                         _load_font(view.content_font, content_px), content_px,
                         view.content_color, frame.size)
        return frame

    def _draw_image(self, frame: Image.Image, view: SlideView, box: Box) -> None:
        if not view.image_url.startswith("data:image"):
            logger.warning("Slide %d: external image %s not inlined; pane left empty",
                           view.index, view.image_url[:80])
            return
        try:
            blob = decode_data_uri(view.image_url)
            picture = Image.open(io.BytesIO(blob))
            picture.load()
        except (ValueError, binascii.Error, UnidentifiedImageError, OSError) as e:
            raise AssetFetchFailure(
                f"Could not decode image for slide {view.index + 1}: {e}",
                index=view.index,
            ) from e

        left, top, width, height = box.to_pixels(*frame.size)
        picture = picture.convert("RGB")
        if view.placement.image_is_background:
            fitted = ImageOps.fit(picture, (width, height))
            frame.paste(fitted, (left, top))
        else:
            fitted = ImageOps.contain(picture, (width, height))
            frame.paste(fitted, (left + (width - fitted.width) // 2,
                                 top + (height - fitted.height) // 2))

    def _draw_overlay(self, frame: Image.Image, box: Box, color: str,
                      opacity: float) -> None:
        left, top, width, height = box.to_pixels(*frame.size)
        layer = Image.new("RGBA", frame.size, (0, 0, 0, 0))
        ImageDraw.Draw(layer).rectangle(
            (left, top, left + width, top + height),
            fill=(*hex_to_rgb_tuple(color), round(opacity * 255)),
        )
        composed = Image.alpha_composite(frame.convert("RGBA"), layer)
        frame.paste(composed.convert("RGB"))

    def _draw_lines(self, draw: ImageDraw.ImageDraw, paragraphs: list[str],
                    box: Box, font, font_px: int, color: str,
                    size: tuple[int, int]) -> None:
        left, top, width, height = box.to_pixels(*size)
        line_height = round(font_px * _LINE_SPACING)
        y = top
        for paragraph in paragraphs:
            for line in _wrap(draw, paragraph, font, width):
                if y + line_height > top + height:
                    return
                draw.text((left, y), line, font=font, fill=hex_to_rgb_tuple(color))
                y += line_height


# ---------------------------------------------------------------------------
# RasterExporter
# ---------------------------------------------------------------------------

@dataclass
class RasterResult:
    """Outcome of a raster export."""
    pdf: bytes
    pages: list[int] = field(default_factory=list)       # Captured slide indices
    failures: list[AssetFetchFailure] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)


class RasterExporter:
    """Builds a paginated PDF from captured slide frames.

    Parameters
    ----------
    theme : Theme
        Active theme used to render the views.
    settings : Settings, optional
        Canvas size and capture scale.
    capture : callable, optional
        ``SlideView -> PIL.Image``.  Defaults to ``SlideRasterizer``.
    """

    def __init__(self, theme: Theme, settings: Settings | None = None,
                 capture: Capture | None = None) -> None:
        self.theme = theme
        self.settings = settings or get_settings()
        self.capture = capture or SlideRasterizer(self.settings)

    @property
    def page_size(self) -> tuple[int, int]:
        scale = self.settings.capture_scale
        return (self.settings.canvas_width * scale,
                self.settings.canvas_height * scale)

    def export(self, document: PresentationData,
               mode: ViewMode = ViewMode.PREVIEW,
               on_failure: FailureHandler | None = None) -> RasterResult:
        """Capture every slide in order and assemble the PDF.

        Raises AssetFetchFailure only when no slide could be captured.
        """
        pages: list[Image.Image] = []
        result = RasterResult(pdf=b"")

        for view in render_deck(document, self.theme, mode):
            try:
                frame = self.capture(view)
            except Exception as e:
                failure = e if isinstance(e, AssetFetchFailure) else AssetFetchFailure(
                    f"Could not capture slide {view.index + 1}: {e}", index=view.index,
                )
                failure.index = view.index
                logger.error("Failed to capture slide %d: %s", view.index, e)
                result.failures.append(failure)
                if on_failure is not None:
                    on_failure(failure)
                continue
            pages.append(self._to_page(frame))
            result.pages.append(view.index)

        if not pages:
            raise AssetFetchFailure("No slides could be captured for the PDF.")

        buf = io.BytesIO()
        pages[0].save(
            buf, format="PDF", save_all=True, append_images=pages[1:],
            resolution=72.0 * self.settings.capture_scale,
        )
        result.pdf = buf.getvalue()
        logger.info("Built PDF %r: %d page(s), %d failure(s)",
                    document.title, result.page_count, len(result.failures))
        return result

    def export_to_file(self, document: PresentationData,
                       path: str | Path | None = None, **kwargs) -> RasterResult:
        """Export and write ``<title>.pdf`` (or ``path``)."""
        result = self.export(document, **kwargs)
        path = Path(path) if path else Path(default_filename(document.title, "pdf"))
        path.write_bytes(result.pdf)
        return result

    def _to_page(self, frame: Image.Image) -> Image.Image:
        """Scale a captured frame onto the fixed page canvas."""
        frame = frame.convert("RGB")
        if frame.size != self.page_size:
            frame = frame.resize(self.page_size)
        return frame
