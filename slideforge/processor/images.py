"""Slide imagery — placeholder references and inline conversion.

Placeholder references are built from the slide's generation prompt plus a
random token so each request gets a fresh image:

    https://picsum.photos/seed/<keywords+token>/1280/720

The PPTX exporter only embeds inline ``data:`` URIs, so before a deck export
every external reference is fetched concurrently and converted.  A failed
fetch yields an empty url and a notice, never an exception.
"""

import asyncio
import base64
import copy
import logging
import random
import string
from dataclasses import dataclass, field
from urllib.parse import quote

import httpx

from slideforge.config import get_settings
from slideforge.errors import AssetFetchFailure
from slideforge.schema.models import PresentationData

logger = logging.getLogger(__name__)

_TOKEN_ALPHABET = string.ascii_lowercase + string.digits
_TOKEN_LENGTH = 6
_MAX_KEYWORDS = 3


# ---------------------------------------------------------------------------
# Placeholder references
# ---------------------------------------------------------------------------

def cache_buster(length: int = _TOKEN_LENGTH) -> str:
    """Short random base36 token; collision avoidance only."""
    return "".join(random.choices(_TOKEN_ALPHABET, k=length))


def prompt_keywords(prompt: str) -> str:
    """First three space-separated words of a prompt, comma-joined."""
    return ",".join(prompt.split(" ")[:_MAX_KEYWORDS])


def _seed_url(seed: str) -> str:
    settings = get_settings()
    return (
        f"https://{settings.image_host}/seed/{quote(seed, safe='')}"
        f"/{settings.image_width}/{settings.image_height}"
    )


def placeholder_image_url(prompt: str) -> str:
    """Placeholder image reference keyed by prompt keywords + random token."""
    return _seed_url(prompt_keywords(prompt) + cache_buster())


def welcome_image_url() -> str:
    """Fixed placeholder reference for the welcome slide."""
    return _seed_url("welcome")


def placeholder_prefix() -> str:
    """Deterministic prefix every placeholder reference starts with."""
    return f"https://{get_settings().image_host}/seed/"


# ---------------------------------------------------------------------------
# Fetching
# ---------------------------------------------------------------------------

def to_data_uri(content: bytes, content_type: str) -> str:
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


def decode_data_uri(uri: str) -> bytes:
    """Return the binary payload of a base64 ``data:`` URI."""
    header, sep, payload = uri.partition(",")
    if not sep or not header.startswith("data:") or ";base64" not in header:
        raise ValueError("Not a base64 data URI")
    return base64.b64decode(payload, validate=True)


async def fetch_image_as_data_uri(url: str, client: httpx.AsyncClient) -> str:
    """Fetch an image and return it as a data URI, or "" on any failure."""
    try:
        response = await client.get(url, headers={"Cache-Control": "no-cache"},
                                    follow_redirects=True)
        response.raise_for_status()
        content_type = response.headers.get("content-type", "").split(";")[0].strip()
        if not content_type.startswith("image/"):
            raise ValueError(
                f"The response from {url} was not a valid image. "
                f"Content-Type: {content_type or 'unknown'}"
            )
        return to_data_uri(response.content, content_type)
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("Failed to fetch and process image from %s: %s", url, e)
        return ""


# ---------------------------------------------------------------------------
# Bulk inlining
# ---------------------------------------------------------------------------

@dataclass
class InlineResult:
    """A copy of the document with external images inlined."""
    document: PresentationData
    failures: list[AssetFetchFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


async def inline_images(document: PresentationData,
                        client: httpx.AsyncClient | None = None) -> InlineResult:
    """Convert every external image reference to inline form.

    Fetches run concurrently; the call returns only after all of them have
    finished.  The input document is left untouched.
    """
    result_doc = copy.deepcopy(document)
    targets = [
        (idx, slide.image)
        for idx, slide in enumerate(result_doc.slides)
        if slide.image is not None and slide.image.is_external
    ]
    if not targets:
        return InlineResult(result_doc)

    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=get_settings().fetch_timeout)
    try:
        inlined = await asyncio.gather(
            *(fetch_image_as_data_uri(image.url, client) for _, image in targets)
        )
    finally:
        if owns_client:
            await client.aclose()

    failures: list[AssetFetchFailure] = []
    for (idx, image), data_uri in zip(targets, inlined):
        if not data_uri:
            failures.append(AssetFetchFailure(
                f"Could not fetch image for slide {idx + 1}",
                index=idx, url=image.url,
            ))
        image.url = data_uri

    logger.info("Inlined %d/%d slide images",
                len(targets) - len(failures), len(targets))
    return InlineResult(result_doc, failures)
