"""QA validation package for SlideForge.

Validates exported PPTX output against the presentation document — checks
slide count, dimensions, slide order, speaker notes and embedded images.
"""

from .validator import (
    DeckValidator,
    Issue,
    QAResult,
    validate_deck,
)

__all__ = [
    "DeckValidator",
    "Issue",
    "QAResult",
    "validate_deck",
]
