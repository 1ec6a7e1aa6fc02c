"""QA validator — reads an exported PPTX back and checks it against its document.

Validates that a built deck matches the document it came from: slide count
(document slides plus the opening and closing slides), 16:9 dimensions,
slide order by title, speaker notes and embedded pictures.  Uses python-pptx
to read the generated file.

Usage::

    from slideforge.qa.validator import DeckValidator

    validator = DeckValidator(document, theme)
    result = validator.validate(pptx_bytes)
    assert result.passed, result.summary()
"""

import io
from dataclasses import dataclass, field

from pptx import Presentation
from pptx.enum.shapes import MSO_SHAPE_TYPE
from pptx.util import Inches

from slideforge.config import Settings, get_settings
from slideforge.generator.pptx_builder import THANK_YOU_SLIDE
from slideforge.schema.layout import resolve_layout
from slideforge.schema.models import PresentationData, Slide
from slideforge.schema.themes import Theme, get_theme


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class Issue:
    """A single QA issue found during validation."""
    severity: str       # "error" or "warning"
    slide_index: int    # Deck position; -1 for presentation-level issues
    slide_title: str
    category: str       # e.g. "slide_count", "title", "notes", "image"
    message: str

    def __str__(self) -> str:
        loc = f"slide {self.slide_index}"
        if self.slide_title:
            loc += f" ({self.slide_title})"
        return f"[{self.severity.upper()}] {loc}: {self.message}"


@dataclass
class QAResult:
    """Aggregated result of QA validation."""
    issues: list[Issue] = field(default_factory=list)

    @property
    def errors(self) -> list[Issue]:
        return [i for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> list[Issue]:
        return [i for i in self.issues if i.severity == "warning"]

    @property
    def passed(self) -> bool:
        return len(self.errors) == 0

    def summary(self) -> str:
        """One-line summary string."""
        status = "PASS" if self.passed else "FAIL"
        return (
            f"QA {status}: {len(self.errors)} error(s), "
            f"{len(self.warnings)} warning(s)"
        )

    def report(self) -> str:
        """Multi-line report of all issues."""
        lines = [self.summary()]
        for issue in self.issues:
            lines.append(f"  {issue}")
        return "\n".join(lines)

    def add(self, severity: str, slide_index: int, slide_title: str,
            category: str, message: str) -> None:
        self.issues.append(Issue(severity, slide_index, slide_title,
                                 category, message))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _all_text_on_slide(slide) -> str:
    """Concatenate all text on a slide for content searches."""
    parts: list[str] = []
    for shape in slide.shapes:
        if shape.has_text_frame:
            parts.append(shape.text_frame.text)
    return " ".join(parts)


def _picture_count(slide) -> int:
    return sum(1 for s in slide.shapes if s.shape_type == MSO_SHAPE_TYPE.PICTURE)


def _notes_text(slide) -> str:
    if not slide.has_notes_slide:
        return ""
    return slide.notes_slide.notes_text_frame.text


# ---------------------------------------------------------------------------
# DeckValidator
# ---------------------------------------------------------------------------

class DeckValidator:
    """Validates an exported PPTX against the document it was built from.

    Parameters
    ----------
    document : PresentationData
        The document passed to the deck builder (after image inlining).
    theme : Theme, optional
        The theme used for export; defaults to the document's theme.
    """

    def __init__(self, document: PresentationData, theme: Theme | None = None,
                 settings: Settings | None = None) -> None:
        self.document = document
        self.theme = theme or get_theme(document.theme)
        self.settings = settings or get_settings()

    @property
    def expected_slides(self) -> list[Slide]:
        return [*self.document.slides, THANK_YOU_SLIDE]

    def validate(self, pptx_bytes: bytes) -> QAResult:
        """Run all validation checks on a built PPTX."""
        prs = Presentation(io.BytesIO(pptx_bytes))
        result = QAResult()

        self._check_slide_count(prs, result)
        self._check_dimensions(prs, result)

        # Per-slide checks (only if count matches)
        if len(prs.slides) == len(self.expected_slides) + 1:
            self._check_opening_slide(prs.slides[0], result)
            for offset, slide_data in enumerate(self.expected_slides, start=1):
                self._check_slide(prs.slides[offset], offset, slide_data, result)

        return result

    # ------------------------------------------------------------------
    # Presentation-level checks
    # ------------------------------------------------------------------

    def _check_slide_count(self, prs: Presentation, result: QAResult) -> None:
        expected = len(self.document.slides) + 2
        actual = len(prs.slides)
        if actual != expected:
            result.add("error", -1, "", "slide_count",
                       f"Expected {expected} slides, got {actual}")

    def _check_dimensions(self, prs: Presentation, result: QAResult) -> None:
        expected_w = Inches(self.settings.deck_width_inches)
        expected_h = Inches(self.settings.deck_height_inches)
        if prs.slide_width != expected_w or prs.slide_height != expected_h:
            result.add("error", -1, "", "dimensions",
                       f"Slide size {prs.slide_width}x{prs.slide_height} != "
                       f"expected {expected_w}x{expected_h}")

    # ------------------------------------------------------------------
    # Slide-level checks
    # ------------------------------------------------------------------

    def _check_opening_slide(self, slide, result: QAResult) -> None:
        if self.document.title not in _all_text_on_slide(slide):
            result.add("error", 0, self.document.title, "title",
                       "Opening slide does not show the presentation title")

    def _check_slide(self, slide, index: int, slide_data: Slide,
                     result: QAResult) -> None:
        text = _all_text_on_slide(slide)
        if slide_data.title not in text:
            result.add("error", index, slide_data.title, "title",
                       f"Title {slide_data.title!r} not found on slide")

        notes = _notes_text(slide)
        if slide_data.speaker_notes and notes != slide_data.speaker_notes:
            result.add("warning", index, slide_data.title, "notes",
                       "Speaker notes missing or different")

        placement = resolve_layout(slide_data, self.theme)
        wants_picture = (placement.has_image_pane and slide_data.image is not None
                         and slide_data.image.is_inline)
        if wants_picture and _picture_count(slide) == 0:
            result.add("warning", index, slide_data.title, "image",
                       "Inline image was not embedded")
        elif slide_data.image and slide_data.image.is_external and placement.has_image_pane:
            result.add("warning", index, slide_data.title, "image",
                       "Image is an external reference and was not embedded")


# ---------------------------------------------------------------------------
# Convenience function
# ---------------------------------------------------------------------------

def validate_deck(pptx_bytes: bytes, document: PresentationData,
                  theme: Theme | None = None) -> QAResult:
    """One-shot convenience: validate a deck against its document."""
    return DeckValidator(document, theme).validate(pptx_bytes)
