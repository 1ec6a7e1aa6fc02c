"""Shared fixtures: default settings, sample documents and inline images."""

import base64
import io

import pytest
from PIL import Image

from slideforge.config import Settings, set_settings
from slideforge.schema.models import (
    PresentationData,
    Slide,
    SlideImage,
    SlideLayout,
    SlideTheme,
)


@pytest.fixture(autouse=True)
def default_settings(monkeypatch):
    """Every test runs with default settings and no env overrides."""
    monkeypatch.delenv("SLIDEFORGE_IMAGE_HOST", raising=False)
    monkeypatch.delenv("SLIDEFORGE_FETCH_TIMEOUT", raising=False)
    set_settings(Settings())
    yield
    set_settings(None)


def make_png(color=(255, 0, 0), size=(64, 36)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


def make_data_uri(color=(255, 0, 0), size=(64, 36)) -> str:
    encoded = base64.b64encode(make_png(color, size)).decode("ascii")
    return f"data:image/png;base64,{encoded}"


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def red_data_uri():
    return make_data_uri()


@pytest.fixture
def two_slide_document(red_data_uri):
    """Welcome slide plus one content slide, images already inline."""
    return PresentationData(
        title="AI Basics",
        theme=SlideTheme.CORPORATE,
        slides=[
            Slide(
                title="AI Basics",
                content="Welcome to the presentation!",
                layout=SlideLayout.BACKGROUND_IMAGE,
                speaker_notes="A welcome slide to start the presentation.",
                image=SlideImage("beautiful abstract welcome background", red_data_uri),
                synthetic=True,
            ),
            Slide(
                title="Intro",
                content="Some context.\n- point one\n- point two",
                layout=SlideLayout.IMAGE_LEFT,
                speaker_notes="Explain the intro.",
                image=SlideImage("robot reading a book", red_data_uri),
            ),
        ],
    )
