"""PPTX deck builder — exports a PresentationData as a PowerPoint file.

Consumes a document and the active theme, resolves each slide's layout with
the shared resolver, and renders text, inline images, overlays and speaker
notes with python-pptx.  The deck is framed by a title-only opening slide
and a closing "Thank You!" slide that exist only in the export.

Images are embedded only from inline ``data:`` URIs.  Fetching external
references is the caller's job (see ``processor.images.inline_images``).

Usage::

    from slideforge.generator.pptx_builder import DeckBuilder
    from slideforge.schema.themes import get_theme

    builder = DeckBuilder(get_theme(document.theme))
    pptx_bytes = builder.build(document)

    with open(f"{document.title}.pptx", "wb") as f:
        f.write(pptx_bytes)
"""

import binascii
import io
import logging
from pathlib import Path

from lxml import etree
from PIL import Image, UnidentifiedImageError
from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.shapes import MSO_SHAPE
from pptx.enum.text import PP_ALIGN
from pptx.oxml.ns import qn
from pptx.util import Emu, Inches, Pt

from slideforge.config import Settings, get_settings
from slideforge.errors import AssetFetchFailure
from slideforge.generator.markdown import TextRun, parse_markdown
from slideforge.generator.viewer import OPENING_TITLE_SIZE_PT, TITLE_SIZE_PT
from slideforge.processor.images import decode_data_uri
from slideforge.schema.layout import Box, Placement, resolve_layout
from slideforge.schema.loader import default_filename
from slideforge.schema.models import PresentationData, Slide, SlideLayout
from slideforge.schema.themes import Theme, get_theme

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_BLANK_LAYOUT = 6
_OPENING_TITLE_BOX = Box(0.05, 0.44, 0.90, 0.18)
_BULLET_CHAR = "•"
_BULLET_INDENT = Emu(285750)   # 0.3125in hanging indent

THANK_YOU_SLIDE = Slide(
    title="Thank You!",
    content="Any Questions?",
    layout=SlideLayout.TEXT_ONLY,
    speaker_notes="End of presentation.",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _hex_to_rgb(hex_color: str) -> RGBColor:
    """Convert '#RRGGBB' hex string to an RGBColor."""
    h = hex_color.lstrip("#")
    return RGBColor(*bytes.fromhex(h))


def _opening_title_color(theme: Theme) -> str:
    """White titles would vanish on the plain opening slide; use black."""
    if theme.title_color.upper() in ("#FFFFFF", "FFFFFF"):
        return "#000000"
    return theme.title_color


def _contain(image_size: tuple[int, int],
             box: tuple[float, float, float, float]) -> tuple[float, float, float, float]:
    """Fit an image inside a box keeping aspect ratio, centred."""
    img_w, img_h = image_size
    left, top, width, height = box
    ratio = min(width / img_w, height / img_h)
    fit_w, fit_h = img_w * ratio, img_h * ratio
    return (left + (width - fit_w) / 2, top + (height - fit_h) / 2, fit_w, fit_h)


def _set_bullet(paragraph) -> None:
    """Give a paragraph a hanging-indent bullet."""
    pPr = paragraph._p.get_or_add_pPr()
    pPr.set("marL", str(_BULLET_INDENT))
    pPr.set("indent", str(-_BULLET_INDENT))
    bu_char = etree.SubElement(pPr, qn("a:buChar"))
    bu_char.set("char", _BULLET_CHAR)


def _set_fill_alpha(shape, opacity: float) -> None:
    """Apply opacity (0-1) to a shape's solid fill colour."""
    srgb = shape._element.spPr.find(qn("a:solidFill")).find(qn("a:srgbClr"))
    alpha = etree.SubElement(srgb, qn("a:alpha"))
    alpha.set("val", str(int(round(opacity * 100000))))


def _add_fade_transition(slide) -> None:
    transition = etree.SubElement(slide._element, qn("p:transition"))
    etree.SubElement(transition, qn("p:fade"))


# ---------------------------------------------------------------------------
# DeckBuilder
# ---------------------------------------------------------------------------

class DeckBuilder:
    """Builds a PowerPoint deck from a presentation document.

    Parameters
    ----------
    theme : Theme
        Active theme; may differ from ``document.theme`` when the user
        switched themes in the viewer.
    settings : Settings, optional
        Deck dimensions; defaults to the process-wide settings.
    """

    def __init__(self, theme: Theme, settings: Settings | None = None) -> None:
        self.theme = theme
        self.settings = settings or get_settings()
        self.width_in = self.settings.deck_width_inches
        self.height_in = self.settings.deck_height_inches
        self.failures: list[AssetFetchFailure] = []

    def build(self, document: PresentationData) -> bytes:
        """Build the PPTX and return it as bytes.

        Image problems on individual slides are collected in
        ``self.failures`` and never abort the build.
        """
        self.failures = []
        prs = Presentation()
        prs.slide_width = Inches(self.width_in)
        prs.slide_height = Inches(self.height_in)

        self._build_opening_slide(prs, document.title)
        for idx, slide in enumerate(document.slides):
            self._build_slide(prs, slide, idx)
        self._build_slide(prs, THANK_YOU_SLIDE, len(document.slides))

        buf = io.BytesIO()
        prs.save(buf)
        logger.info("Built deck %r: %d slides, %d image failure(s)",
                    document.title, len(prs.slides), len(self.failures))
        return buf.getvalue()

    def build_to_file(self, document: PresentationData,
                      path: str | Path | None = None) -> Path:
        """Build the PPTX and write it; defaults to ``<title>.pptx``."""
        path = Path(path) if path else Path(default_filename(document.title, "pptx"))
        path.write_bytes(self.build(document))
        return path

    # ------------------------------------------------------------------
    # Slide builders
    # ------------------------------------------------------------------

    def _new_slide(self, prs: Presentation):
        slide = prs.slides.add_slide(prs.slide_layouts[_BLANK_LAYOUT])
        fill = slide.background.fill
        fill.solid()
        fill.fore_color.rgb = _hex_to_rgb(self.theme.background_color)
        return slide

    def _build_opening_slide(self, prs: Presentation, title: str) -> None:
        slide = self._new_slide(prs)
        self._add_text(
            slide, [TextRun(title)], _OPENING_TITLE_BOX,
            font=self.theme.title_font, size_pt=OPENING_TITLE_SIZE_PT,
            color=_opening_title_color(self.theme), bold=True,
            align=PP_ALIGN.CENTER,
        )

    def _build_slide(self, prs: Presentation, slide_data: Slide, index: int) -> None:
        """Render one document slide according to its resolved placement."""
        slide = self._new_slide(prs)
        placement = resolve_layout(slide_data, self.theme)

        if slide_data.speaker_notes:
            slide.notes_slide.notes_text_frame.text = slide_data.speaker_notes
        _add_fade_transition(slide)

        if placement.has_image_pane:
            self._render_image(slide, slide_data, placement, index)
        if placement.overlay is not None:
            self._add_overlay(slide, placement.overlay)

        self._add_text(
            slide, [TextRun(slide_data.title)], placement.title,
            font=self.theme.title_font, size_pt=TITLE_SIZE_PT,
            color=self.theme.title_color, bold=True,
        )
        self._add_text(
            slide, parse_markdown(slide_data.content), placement.content,
            font=self.theme.content_font, size_pt=slide_data.render_font_size,
            color=self.theme.content_color,
        )

    # ------------------------------------------------------------------
    # Shape renderers
    # ------------------------------------------------------------------

    def _render_image(self, slide, slide_data: Slide, placement: Placement,
                      index: int) -> None:
        """Embed the slide image into its pane, if it is inline data."""
        image = slide_data.image
        if image is None or not image.url:
            return
        if not image.is_inline:
            logger.warning("Slide %d: image %s is not inline data; skipped",
                           index, image.url[:80])
            return
        try:
            blob = decode_data_uri(image.url)
            with Image.open(io.BytesIO(blob)) as img:
                size = img.size
        except (ValueError, binascii.Error, UnidentifiedImageError) as e:
            logger.warning("Slide %d: could not decode image: %s", index, e)
            self.failures.append(AssetFetchFailure(
                f"Could not embed image for slide {index + 1}", index=index,
            ))
            return

        box = placement.image.to_inches(self.width_in, self.height_in)
        if not placement.image_is_background:
            box = _contain(size, box)
        left, top, width, height = box
        slide.shapes.add_picture(
            io.BytesIO(blob), Inches(left), Inches(top),
            width=Inches(width), height=Inches(height),
        )

    def _add_overlay(self, slide, box: Box) -> None:
        """Semi-transparent panel that keeps text readable over an image."""
        left, top, width, height = box.to_inches(self.width_in, self.height_in)
        shape = slide.shapes.add_shape(
            MSO_SHAPE.RECTANGLE,
            Inches(left), Inches(top), Inches(width), Inches(height),
        )
        shape.fill.solid()
        shape.fill.fore_color.rgb = _hex_to_rgb(self.theme.overlay_color)
        _set_fill_alpha(shape, self.theme.overlay_opacity)
        shape.line.fill.background()

    def _add_text(self, slide, runs: list[TextRun], box: Box, *, font: str,
                  size_pt: float, color: str, bold: bool = False,
                  align=PP_ALIGN.LEFT) -> None:
        """Add a text box with one paragraph per run."""
        left, top, width, height = box.to_inches(self.width_in, self.height_in)
        txbox = slide.shapes.add_textbox(
            Inches(left), Inches(top), Inches(width), Inches(height),
        )
        tf = txbox.text_frame
        tf.word_wrap = True

        for idx, text_run in enumerate(runs):
            p = tf.paragraphs[0] if idx == 0 else tf.add_paragraph()
            p.alignment = align
            if text_run.bullet:
                _set_bullet(p)
            run = p.add_run()
            run.text = text_run.text
            run.font.name = font
            run.font.size = Pt(size_pt)
            run.font.bold = bold
            run.font.color.rgb = _hex_to_rgb(color)


# ---------------------------------------------------------------------------
# Convenience function
# ---------------------------------------------------------------------------

def build_deck(document: PresentationData, theme: Theme | None = None) -> bytes:
    """One-shot convenience: build a PPTX with the document's own theme."""
    return DeckBuilder(theme or get_theme(document.theme)).build(document)
