"""Presentation document models - the contract between normalizer, viewer and exporters.

Defines the typed structure of a generated presentation: the document, its
ordered slides, and the optional image attached to each slide.  Keys on the
wire use the camelCase names the generation model emits (``speakerNotes``,
``fontSize``, ``generationPrompt``).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class SlideTheme(Enum):
    """Named visual themes a presentation can be rendered with."""
    PROFESSIONAL = "professional"
    CREATIVE = "creative"
    MINIMALIST = "minimalist"
    VIBRANT = "vibrant"
    CORPORATE = "corporate"

    @classmethod
    def coerce(cls, value: Any) -> "SlideTheme":
        """Map a raw value onto a theme, falling back to corporate."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.CORPORATE


class SlideLayout(Enum):
    """How text and image share a slide."""
    TEXT_ONLY = "text-only"
    IMAGE_LEFT = "image-left"
    IMAGE_RIGHT = "image-right"
    BACKGROUND_IMAGE = "background-image"

    @property
    def has_image_pane(self) -> bool:
        return self is not SlideLayout.TEXT_ONLY


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_FONT_SIZE = 14
MIN_FONT_SIZE = 8
MAX_FONT_SIZE = 48


# ---------------------------------------------------------------------------
# SlideImage
# ---------------------------------------------------------------------------

@dataclass
class SlideImage:
    """Image attached to a slide: the prompt it came from and where it lives."""
    generation_prompt: str
    url: str | None = None          # http(s) reference or data: URI

    @property
    def is_inline(self) -> bool:
        """True when the url carries base64 image data."""
        return bool(self.url) and self.url.startswith("data:image")

    @property
    def is_external(self) -> bool:
        return bool(self.url) and self.url.startswith("http")

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"generationPrompt": self.generation_prompt}
        if self.url is not None:
            d["url"] = self.url
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "SlideImage":
        return cls(
            generation_prompt=d.get("generationPrompt", ""),
            url=d.get("url"),
        )


# ---------------------------------------------------------------------------
# Slide
# ---------------------------------------------------------------------------

@dataclass
class Slide:
    """A single slide of a presentation."""
    title: str
    content: str = ""                    # Markdown subset: paragraphs and -/* bullets
    layout: SlideLayout | None = None    # None -> theme default at render time
    speaker_notes: str | None = None
    font_size: int | None = None
    image: SlideImage | None = None
    synthetic: bool = False              # True only for the injected welcome slide

    @property
    def render_font_size(self) -> int:
        return self.font_size or DEFAULT_FONT_SIZE

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"title": self.title, "content": self.content}
        if self.layout is not None:
            d["layout"] = self.layout.value
        if self.speaker_notes is not None:
            d["speakerNotes"] = self.speaker_notes
        if self.font_size is not None:
            d["fontSize"] = self.font_size
        if self.image is not None:
            d["image"] = self.image.to_dict()
        if self.synthetic:
            d["synthetic"] = True
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "Slide":
        layout = d.get("layout")
        image = d.get("image")
        return cls(
            title=d.get("title", ""),
            content=d.get("content", ""),
            layout=SlideLayout(layout) if layout else None,
            speaker_notes=d.get("speakerNotes"),
            font_size=d.get("fontSize"),
            image=SlideImage.from_dict(image) if isinstance(image, dict) else None,
            synthetic=d.get("synthetic") is True,
        )


# ---------------------------------------------------------------------------
# PresentationData: top-level container
# ---------------------------------------------------------------------------

@dataclass
class PresentationData:
    """A complete presentation document.

    Created once per generation request by the normalizer, edited in place
    by index-addressed operations, and consumed by the viewer and both
    exporters.
    """
    title: str
    theme: SlideTheme = SlideTheme.CORPORATE
    slides: list[Slide] = field(default_factory=list)

    @property
    def welcome_slide(self) -> Slide | None:
        """The injected welcome slide, if the document has been normalized."""
        if self.slides and self.slides[0].synthetic:
            return self.slides[0]
        return None

    def content_slides(self) -> list[Slide]:
        """Slides that came from the model (everything but the welcome slide)."""
        return [s for s in self.slides if not s.synthetic]

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "theme": self.theme.value,
            "slides": [s.to_dict() for s in self.slides],
        }

    @classmethod
    def from_dict(cls, d: dict) -> "PresentationData":
        return cls(
            title=d["title"],
            theme=SlideTheme.coerce(d.get("theme")),
            slides=[Slide.from_dict(s) for s in d.get("slides", [])],
        )
