"""Error taxonomy for the presentation pipeline.

Structural failures (``MalformedResponse``, ``InvalidStructure``,
``UpstreamUnavailable``) abort a generation request.  ``AssetFetchFailure``
is per-item and is reported as a notice instead of aborting a batch.
"""


class SlideForgeError(Exception):
    """Base class; ``user_message`` is safe to show to end users."""

    user_message = "An unknown error occurred."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.user_message)

    @property
    def message(self) -> str:
        return str(self)


class UpstreamUnavailable(SlideForgeError):
    """The generation collaborator returned nothing or reported overload."""

    user_message = (
        "The presentation generation service is currently busy. "
        "Please wait a moment and try again."
    )


class MalformedResponse(SlideForgeError):
    """No JSON object could be located or parsed in the model output."""

    user_message = "AI returned an invalid response format."


class InvalidStructure(SlideForgeError):
    """JSON parsed but lacks the required top-level fields."""

    user_message = "Invalid JSON structure received from AI."


class AssetFetchFailure(SlideForgeError):
    """A single image fetch or slide capture failed."""

    user_message = "Could not process an image or slide."

    def __init__(self, message: str | None = None, *, index: int | None = None,
                 url: str | None = None) -> None:
        super().__init__(message)
        self.index = index
        self.url = url


class AudioGenerationFailure(SlideForgeError):
    """The audio collaborator returned no media."""

    user_message = (
        "The AI model did not return any audio data. "
        "This may be a temporary issue. Please try again."
    )


class EditError(SlideForgeError):
    """An editing operation cannot be applied to the slide."""

    user_message = "That change could not be applied to the slide."
