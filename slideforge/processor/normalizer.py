"""Response normalizer — turns raw model text into a valid PresentationData.

Models reliably produce *approximately* valid JSON wrapped in prose or code
fences.  Normalization runs in separate stages:

1. ``extract_json``        locate and parse the outermost ``{...}``
2. ``validate_structure``  reject documents missing title/slides/theme
3. ``repair_slides``       fill per-slide defaults (never fails)
4. ``insert_welcome_slide`` prepend the synthetic welcome slide
5. ``assign_placeholder_images`` give every content slide a fresh image url

Stages 1-2 raise; stages 3-5 always succeed.

Usage::

    from slideforge.processor.normalizer import normalize_response

    document = normalize_response(model_text)
"""

import json
import logging
import math
from typing import Any

from slideforge.errors import InvalidStructure, MalformedResponse
from slideforge.processor.images import placeholder_image_url, welcome_image_url
from slideforge.schema.models import (
    MAX_FONT_SIZE,
    MIN_FONT_SIZE,
    PresentationData,
    Slide,
    SlideImage,
    SlideLayout,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MISSING_NOTES = "No speaker notes were generated for this slide."
FALLBACK_PROMPT = "abstract background"
DEFAULT_LAYOUT = SlideLayout.TEXT_ONLY

WELCOME_CONTENT = "Welcome to the presentation!"
WELCOME_NOTES = "A welcome slide to start the presentation."
WELCOME_PROMPT = "beautiful abstract welcome background"

_LAYOUT_VALUES = {layout.value for layout in SlideLayout}


def _reject_constant(name: str) -> None:
    raise ValueError(f"Non-standard JSON constant {name}")


# ---------------------------------------------------------------------------
# Stage 1: extraction
# ---------------------------------------------------------------------------

def extract_json(text: str | None) -> dict[str, Any]:
    """Parse the substring between the first '{' and the last '}'.

    Raises MalformedResponse when no object can be located or parsed.
    """
    text = text or ""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        logger.error("Could not find a valid JSON object in the AI response. "
                     "Raw AI response: %r", text)
        raise MalformedResponse()

    candidate = text[start:end + 1]
    try:
        data = json.loads(candidate, parse_constant=_reject_constant)
    except ValueError as e:
        logger.error("Failed to parse AI response: %s. Extracted string: %r. "
                     "Raw AI response: %r", e, candidate, text)
        raise MalformedResponse(
            "Failed to process AI response. The format was invalid."
        ) from e

    if not isinstance(data, dict):
        logger.error("AI response JSON is not an object: %r", candidate)
        raise MalformedResponse()
    return data


# ---------------------------------------------------------------------------
# Stage 2: structural validation
# ---------------------------------------------------------------------------

def validate_structure(data: dict[str, Any]) -> None:
    """Require a non-empty title, a list of slide objects and a theme."""
    title = data.get("title")
    slides = data.get("slides")
    problems = []
    if not isinstance(title, str) or not title.strip():
        problems.append("missing title")
    if not isinstance(slides, list):
        problems.append("slides is not a list")
    elif not all(isinstance(s, dict) for s in slides):
        problems.append("slides contains non-object entries")
    if not data.get("theme"):
        problems.append("missing theme")

    if problems:
        logger.error("Invalid JSON structure received from AI (%s): %r",
                     ", ".join(problems), data)
        raise InvalidStructure()


# ---------------------------------------------------------------------------
# Stage 3: per-slide repair
# ---------------------------------------------------------------------------

def _repair_content(content: Any) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        # Some models answer with a bare bullet array
        return "\n".join(f"- {item}" for item in content)
    return "" if content is None else str(content)


def _repair_notes(notes: Any) -> str:
    if notes is None:
        return MISSING_NOTES
    if isinstance(notes, str):
        return notes
    if isinstance(notes, list):
        return "\n".join(str(item) for item in notes)
    return str(notes)


def _repair_font_size(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return max(MIN_FONT_SIZE, min(MAX_FONT_SIZE, int(value)))


def repair_slide(raw: dict[str, Any], position: int = 0) -> dict[str, Any]:
    """Return a copy of a raw slide dict with every optional field defaulted."""
    slide = dict(raw)

    title = slide.get("title")
    if not isinstance(title, str) or not title.strip():
        slide["title"] = f"Slide {position + 1}"
    slide["content"] = _repair_content(slide.get("content"))

    slide["speakerNotes"] = _repair_notes(slide.get("speakerNotes"))

    image = slide.get("image")
    if not isinstance(image, dict) or not image:
        image = {"generationPrompt": FALLBACK_PROMPT}
    else:
        image = dict(image)
    prompt = image.get("generationPrompt")
    if not isinstance(prompt, str) or not prompt.strip():
        image["generationPrompt"] = FALLBACK_PROMPT
    if not isinstance(image.get("url"), str):
        image.pop("url", None)
    slide["image"] = image

    if slide.get("layout") not in _LAYOUT_VALUES:
        slide["layout"] = DEFAULT_LAYOUT.value

    font_size = _repair_font_size(slide.get("fontSize"))
    if font_size is None:
        slide.pop("fontSize", None)
    else:
        slide["fontSize"] = font_size

    if position > 0 or slide.get("synthetic") is not True:
        slide.pop("synthetic", None)
    return slide


def repair_slides(raw_slides: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Repair every slide, keeping order."""
    return [repair_slide(s, i) for i, s in enumerate(raw_slides)]


# ---------------------------------------------------------------------------
# Stage 4: welcome slide
# ---------------------------------------------------------------------------

def make_welcome_slide(title: str) -> Slide:
    """The synthetic opening slide shown before the model's slides."""
    return Slide(
        title=title,
        content=WELCOME_CONTENT,
        layout=SlideLayout.BACKGROUND_IMAGE,
        speaker_notes=WELCOME_NOTES,
        image=SlideImage(generation_prompt=WELCOME_PROMPT, url=welcome_image_url()),
        synthetic=True,
    )


def insert_welcome_slide(slides: list[Slide], title: str) -> list[Slide]:
    """Prepend the welcome slide unless one is already at position 0."""
    if slides and slides[0].synthetic:
        return slides
    return [make_welcome_slide(title), *slides]


# ---------------------------------------------------------------------------
# Stage 5: placeholder imagery
# ---------------------------------------------------------------------------

def assign_placeholder_images(slides: list[Slide], overwrite: bool = True) -> None:
    """Give every non-welcome slide a placeholder image url, in place.

    With ``overwrite`` any url the model supplied is replaced; without it,
    only slides lacking a url are filled.
    """
    for slide in slides:
        if slide.synthetic or slide.image is None:
            continue
        if overwrite or not slide.image.url:
            slide.image.url = placeholder_image_url(slide.image.generation_prompt)


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

def normalize_document(data: dict[str, Any]) -> PresentationData:
    """Validate, repair and complete an already-parsed document dict.

    Re-running on a normalized document is a no-op for the welcome slide and
    for image urls that are already set.
    """
    validate_structure(data)
    repaired = repair_slides(data["slides"])
    slides = [Slide.from_dict(s) for s in repaired]

    already_normalized = bool(slides) and slides[0].synthetic
    slides = insert_welcome_slide(slides, data["title"])
    assign_placeholder_images(slides, overwrite=not already_normalized)

    document = PresentationData.from_dict({
        "title": data["title"],
        "theme": data["theme"],
        "slides": [],
    })
    document.slides = slides
    logger.info("Normalized presentation %r: %d slides (theme=%s)",
                document.title, len(slides), document.theme.value)
    return document


def strip_welcome_markers(data: dict[str, Any]) -> dict[str, Any]:
    """Drop any ``synthetic`` keys a model put on its own slides."""
    slides = data.get("slides")
    if not isinstance(slides, list):
        return data
    cleaned = [
        {k: v for k, v in s.items() if k != "synthetic"} if isinstance(s, dict) else s
        for s in slides
    ]
    return {**data, "slides": cleaned}


def normalize_response(text: str | None) -> PresentationData:
    """Full pipeline: raw model text -> PresentationData.

    Model output is never treated as already normalized.
    """
    return normalize_document(strip_welcome_markers(extract_json(text)))
