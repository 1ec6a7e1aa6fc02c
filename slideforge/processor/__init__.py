"""Document processing for SlideForge: normalization, imagery and editing."""

from .editor import PresentationEditor, clamp_font_size
from .generation import (
    GenerationResult,
    GenerationService,
    ModelClient,
    build_prompt,
)
from .images import (
    InlineResult,
    fetch_image_as_data_uri,
    inline_images,
    placeholder_image_url,
    welcome_image_url,
)
from .normalizer import (
    FALLBACK_PROMPT,
    MISSING_NOTES,
    assign_placeholder_images,
    extract_json,
    insert_welcome_slide,
    make_welcome_slide,
    normalize_document,
    normalize_response,
    strip_welcome_markers,
    repair_slide,
    repair_slides,
    validate_structure,
)
