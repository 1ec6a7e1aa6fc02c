"""Generation service — wraps the language-model collaborator.

The model client itself (prompting, model choice, page fetching, speech
synthesis) lives outside this package; it only has to satisfy
``ModelClient``.  This module adds the JSON output instructions, routes
every response through the normalizer, and collapses failures into a
``GenerationResult`` carrying a user-safe message.  Nothing is retried.

Usage::

    service = GenerationService(my_client)
    result = await service.generate_from_prompt("Intro to AI", audience="students")
    if result.success:
        document = result.data
"""

import logging
from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar

from slideforge.errors import (
    AudioGenerationFailure,
    SlideForgeError,
    UpstreamUnavailable,
)
from slideforge.processor.normalizer import normalize_response
from slideforge.schema.models import PresentationData

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Prompt text
# ---------------------------------------------------------------------------

JSON_OUTPUT_INSTRUCTIONS = """
Return the presentation as a valid JSON object with the following structure:
{
  "title": "Your Presentation Title",
  "theme": "corporate",
  "slides": [
    {
      "title": "Slide 1: High-Level Introduction",
      "content": "A concise introductory paragraph followed by a markdown list of 3-5 key takeaways, e.g. - Point 1\\n- Point 2",
      "speakerNotes": "Speaker notes explaining the key points in more detail.",
      "layout": "text-only",
      "image": { "generationPrompt": "A simple, professional, abstract background related to the slide topic." }
    }
  ]
}
Each slide must have a title, content, speakerNotes, a layout and an image property.
Layout must be one of: text-only, image-left, image-right, background-image.
Use markdown lists for bullet points. Do not use markdown for bold or italics.
The image.generationPrompt must be a specific, descriptive, non-empty string.
The theme must be "corporate".
Return ONLY the JSON object, without any surrounding text or markdown formatting.
"""

TRANSIENT_MARKERS = ("503", "overloaded", "temporarily unavailable")

AUDIO_BUSY_MESSAGE = (
    "The audio generation service is currently busy. "
    "Please try again in a moment."
)


def audience_clause(audience: str | None) -> str:
    if not audience:
        return ""
    return f"Tailor the presentation for the following audience: {audience}."


def build_prompt(prompt: str, audience: str | None = None) -> str:
    """Combine the user prompt, audience hint and output instructions."""
    return f"{prompt}\n\n{audience_clause(audience)}\n\n{JSON_OUTPUT_INSTRUCTIONS}"


def is_transient(message: str) -> bool:
    return any(marker in message for marker in TRANSIENT_MARKERS)


# ---------------------------------------------------------------------------
# Collaborator protocol and result type
# ---------------------------------------------------------------------------

class ModelClient(Protocol):
    """What the generation service needs from the model integration."""

    async def generate_presentation(self, prompt: str) -> dict[str, Any]: ...

    async def generate_from_image(self, photo_data_uri: str,
                                  prompt: str) -> dict[str, Any]: ...

    async def summarize_webpage(self, url: str) -> dict[str, Any]: ...

    async def generate_audio(self, text: str) -> dict[str, Any]: ...

    async def answer_question(self, presentation: dict[str, Any],
                              question: str) -> dict[str, Any]: ...

    async def extract_keywords(self, prompt: str) -> dict[str, Any]: ...


@dataclass
class GenerationResult(Generic[T]):
    """Outcome of a service call: data on success, a user message otherwise."""
    success: bool
    data: T | None = None
    error: str | None = None

    @classmethod
    def ok(cls, data: T) -> "GenerationResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def failed(cls, error: str) -> "GenerationResult[T]":
        return cls(success=False, error=error)


def user_message(exc: Exception, busy_message: str | None = None) -> str:
    """Collapse an exception into the message shown to the user."""
    if isinstance(exc, SlideForgeError):
        if busy_message and isinstance(exc, UpstreamUnavailable):
            return busy_message
        return exc.message
    message = str(exc) or "An unknown error occurred."
    if is_transient(message):
        return busy_message or UpstreamUnavailable.user_message
    return message


# ---------------------------------------------------------------------------
# GenerationService
# ---------------------------------------------------------------------------

class GenerationService:
    """Orchestrates model calls and document normalization.

    Parameters
    ----------
    client : ModelClient
        The language-model integration.
    """

    def __init__(self, client: ModelClient) -> None:
        self.client = client

    # ------------------------------------------------------------------
    # Presentation generation
    # ------------------------------------------------------------------

    async def _presentation_from(self, response: dict[str, Any]) -> PresentationData:
        content = (response or {}).get("presentationContent")
        if not content:
            raise UpstreamUnavailable("AI did not return any content.")
        return normalize_response(content)

    async def generate_from_prompt(self, prompt: str, audience: str | None = None,
                                   ) -> GenerationResult[PresentationData]:
        try:
            response = await self.client.generate_presentation(
                build_prompt(prompt, audience))
            return GenerationResult.ok(await self._presentation_from(response))
        except Exception as e:
            logger.exception("Presentation generation from prompt failed")
            return GenerationResult.failed(user_message(e))

    async def generate_from_url(self, url: str, audience: str | None = None,
                                ) -> GenerationResult[PresentationData]:
        try:
            summary = await self.client.summarize_webpage(url)
            prompt = ("Create a presentation based on the following summary:\n\n"
                      f"{(summary or {}).get('summary', '')}")
            response = await self.client.generate_presentation(
                build_prompt(prompt, audience))
            return GenerationResult.ok(await self._presentation_from(response))
        except Exception as e:
            logger.exception("Presentation generation from %s failed", url)
            return GenerationResult.failed(user_message(e))

    async def generate_from_image(self, photo_data_uri: str,
                                  audience: str | None = None,
                                  ) -> GenerationResult[PresentationData]:
        try:
            prompt = ("Analyze the following image and generate structured "
                      "presentation content based on it. "
                      f"{audience_clause(audience)} {JSON_OUTPUT_INSTRUCTIONS}")
            response = await self.client.generate_from_image(photo_data_uri, prompt)
            return GenerationResult.ok(await self._presentation_from(response))
        except Exception as e:
            logger.exception("Presentation generation from image failed")
            return GenerationResult.failed(user_message(e))

    # ------------------------------------------------------------------
    # Side channels
    # ------------------------------------------------------------------

    async def generate_audio(self, text: str) -> GenerationResult[str]:
        """Synthesize speaker-notes audio; returns a media data URI."""
        try:
            response = await self.client.generate_audio(text)
            media = (response or {}).get("media")
            if not media:
                raise AudioGenerationFailure()
            return GenerationResult.ok(media)
        except Exception as e:
            logger.exception("Audio generation failed")
            return GenerationResult.failed(user_message(e, AUDIO_BUSY_MESSAGE))

    async def ask_question(self, document: PresentationData,
                           question: str) -> GenerationResult[str]:
        try:
            response = await self.client.answer_question(document.to_dict(), question)
            return GenerationResult.ok(response["answer"])
        except Exception as e:
            logger.exception("Question answering failed")
            return GenerationResult.failed(user_message(e))

    async def keywords_for_image(self, prompt: str) -> GenerationResult[str]:
        try:
            response = await self.client.extract_keywords(prompt)
            return GenerationResult.ok(response["keywords"])
        except Exception as e:
            logger.exception("Keyword extraction failed")
            return GenerationResult.failed(user_message(e))
