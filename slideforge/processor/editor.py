"""Presentation editor — index-addressed edits on a single document.

The editor is the single owner of a PresentationData during an editing
session.  Every change goes through ``replace_slide`` or
``replace_document``, which swap in patched copies rather than mutating
shared slide objects.
"""

import dataclasses
import logging

from slideforge.errors import EditError
from slideforge.processor.images import placeholder_image_url
from slideforge.schema.models import (
    MAX_FONT_SIZE,
    MIN_FONT_SIZE,
    PresentationData,
    Slide,
    SlideImage,
    SlideLayout,
    SlideTheme,
)

logger = logging.getLogger(__name__)

NEW_IMAGE_PROMPT = "A relevant background image"
UPLOADED_IMAGE_PROMPT = "User uploaded image"


def clamp_font_size(size: int) -> int:
    return max(MIN_FONT_SIZE, min(MAX_FONT_SIZE, size))


class PresentationEditor:
    """Applies editing operations to one presentation document.

    Parameters
    ----------
    document : PresentationData
        The document being edited.  It is replaced in place: ``document``
        always points at the current version.
    """

    def __init__(self, document: PresentationData) -> None:
        self.document = document

    # ------------------------------------------------------------------
    # Core replace operations
    # ------------------------------------------------------------------

    def _slide(self, index: int) -> Slide:
        if not 0 <= index < len(self.document.slides):
            raise IndexError(
                f"Slide index {index} out of range "
                f"(0-{len(self.document.slides) - 1})"
            )
        return self.document.slides[index]

    def replace_slide(self, index: int, **patch) -> Slide:
        """Merge ``patch`` fields into the slide at ``index``."""
        new_slide = dataclasses.replace(self._slide(index), **patch)
        self.document.slides[index] = new_slide
        return new_slide

    def replace_document(self, **patch) -> PresentationData:
        """Merge top-level fields (title, theme, slides) into the document."""
        self.document = dataclasses.replace(self.document, **patch)
        return self.document

    # ------------------------------------------------------------------
    # Editing operations
    # ------------------------------------------------------------------

    def change_title(self, index: int, title: str) -> Slide:
        return self.replace_slide(index, title=title)

    def change_content(self, index: int, content: str) -> Slide:
        return self.replace_slide(index, content=content)

    def change_speaker_notes(self, index: int, notes: str) -> Slide:
        return self.replace_slide(index, speaker_notes=notes)

    def change_font_size(self, index: int, delta: int) -> Slide:
        """Step the font size by ``delta``, clamped to the allowed range."""
        current = self._slide(index).render_font_size
        return self.replace_slide(index, font_size=clamp_font_size(current + delta))

    def change_theme(self, theme: SlideTheme | str) -> PresentationData:
        return self.replace_document(theme=SlideTheme.coerce(theme))

    def next_image(self, index: int) -> Slide:
        """Assign a fresh placeholder image for the slide's prompt."""
        slide = self._slide(index)
        if slide.image is None or not slide.image.generation_prompt:
            raise EditError(
                "There's no prompt to generate a new image. "
                "Please add one in the content view."
            )
        url = placeholder_image_url(slide.image.generation_prompt)
        logger.debug("Slide %d: new placeholder image %s", index, url)
        return self.replace_slide(
            index, image=dataclasses.replace(slide.image, url=url),
        )

    def change_layout(self, index: int, layout: SlideLayout | str) -> Slide:
        """Switch layout; image layouts get an image if the slide has none."""
        layout = SlideLayout(layout)
        slide = self.replace_slide(index, layout=layout)
        if not layout.has_image_pane:
            return slide
        if slide.image is None:
            return self.replace_slide(
                index, image=SlideImage(generation_prompt=NEW_IMAGE_PROMPT, url=""),
            )
        if not slide.image.url and slide.image.generation_prompt:
            return self.next_image(index)
        return slide

    def upload_image(self, index: int, data_uri: str) -> Slide:
        """Attach a user-supplied image (already encoded as a data URI)."""
        if not data_uri.startswith("data:image"):
            raise EditError("Uploaded file is not an image.")
        return self.replace_slide(
            index,
            image=SlideImage(generation_prompt=UPLOADED_IMAGE_PROMPT, url=data_uri),
        )

    def change_image_prompt(self, index: int, prompt: str) -> Slide:
        slide = self._slide(index)
        url = slide.image.url if slide.image else None
        return self.replace_slide(
            index, image=SlideImage(generation_prompt=prompt, url=url),
        )
