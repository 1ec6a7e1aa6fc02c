"""Tests for the document model, theme registry, loader and settings."""

import pytest

from slideforge.config import Settings, load_settings
from slideforge.schema.loader import default_filename, load_document, save_document
from slideforge.schema.models import (
    DEFAULT_FONT_SIZE,
    PresentationData,
    Slide,
    SlideImage,
    SlideLayout,
    SlideTheme,
)
from slideforge.schema.themes import THEMES, get_theme, hex_to_rgb_tuple, theme_options


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

class TestSlideTheme:
    def test_known_value(self):
        assert SlideTheme.coerce("vibrant") is SlideTheme.VIBRANT

    def test_case_insensitive(self):
        assert SlideTheme.coerce(" Minimalist ") is SlideTheme.MINIMALIST

    def test_unknown_falls_back_to_corporate(self):
        assert SlideTheme.coerce("neon") is SlideTheme.CORPORATE

    def test_none_falls_back_to_corporate(self):
        assert SlideTheme.coerce(None) is SlideTheme.CORPORATE


class TestSlideImage:
    def test_inline(self, red_data_uri):
        img = SlideImage("x", red_data_uri)
        assert img.is_inline is True
        assert img.is_external is False

    def test_external(self):
        img = SlideImage("x", "https://picsum.photos/seed/a/1280/720")
        assert img.is_external is True
        assert img.is_inline is False

    def test_no_url(self):
        img = SlideImage("x")
        assert img.is_inline is False
        assert img.is_external is False


class TestSlideSerialization:
    def test_camel_case_keys(self):
        slide = Slide(
            title="T", content="c", layout=SlideLayout.IMAGE_RIGHT,
            speaker_notes="n", font_size=20,
            image=SlideImage("prompt", "https://example.com/a.png"),
        )
        d = slide.to_dict()
        assert d["speakerNotes"] == "n"
        assert d["fontSize"] == 20
        assert d["layout"] == "image-right"
        assert d["image"] == {"generationPrompt": "prompt",
                              "url": "https://example.com/a.png"}
        assert "synthetic" not in d

    def test_round_trip(self):
        slide = Slide(title="T", content="- a", layout=SlideLayout.TEXT_ONLY,
                      speaker_notes="n", image=SlideImage("p"), synthetic=True)
        assert Slide.from_dict(slide.to_dict()) == slide

    def test_synthetic_requires_true(self):
        assert Slide.from_dict({"title": "T", "synthetic": "true"}).synthetic is False
        assert Slide.from_dict({"title": "T", "synthetic": True}).synthetic is True

    def test_missing_layout_is_none(self):
        assert Slide.from_dict({"title": "T"}).layout is None

    def test_default_render_font_size(self):
        assert Slide(title="T").render_font_size == DEFAULT_FONT_SIZE


class TestPresentationData:
    def test_welcome_slide(self, two_slide_document):
        assert two_slide_document.welcome_slide is two_slide_document.slides[0]

    def test_no_welcome_slide(self):
        doc = PresentationData(title="T", slides=[Slide(title="A")])
        assert doc.welcome_slide is None

    def test_content_slides(self, two_slide_document):
        assert [s.title for s in two_slide_document.content_slides()] == ["Intro"]

    def test_round_trip(self, two_slide_document):
        again = PresentationData.from_dict(two_slide_document.to_dict())
        assert again == two_slide_document

    def test_unknown_theme_coerced(self):
        doc = PresentationData.from_dict({"title": "T", "theme": "neon", "slides": []})
        assert doc.theme is SlideTheme.CORPORATE


# ---------------------------------------------------------------------------
# Themes
# ---------------------------------------------------------------------------

class TestThemes:
    def test_every_theme_defined_once(self):
        assert set(THEMES) == set(SlideTheme)

    def test_keys_match(self):
        for key, theme in THEMES.items():
            assert theme.key is key

    def test_get_theme_by_string(self):
        assert get_theme("creative").title_font == "Playfair Display"

    def test_unknown_theme_is_corporate(self):
        assert get_theme("does-not-exist") is THEMES[SlideTheme.CORPORATE]

    def test_none_is_corporate(self):
        assert get_theme(None).key is SlideTheme.CORPORATE

    def test_default_layouts(self):
        assert get_theme("minimalist").default_layout is SlideLayout.TEXT_ONLY
        assert get_theme("vibrant").default_layout is SlideLayout.IMAGE_RIGHT
        assert get_theme("corporate").default_layout is SlideLayout.IMAGE_LEFT

    def test_overlay_matches_background(self):
        for theme in THEMES.values():
            assert theme.overlay_color == theme.background_color
            assert 0 < theme.overlay_opacity < 1

    def test_theme_options(self):
        options = theme_options()
        assert options[0] == ("corporate", "Corporate")
        assert len(options) == 5

    def test_hex_to_rgb_tuple(self):
        assert hex_to_rgb_tuple("#0D6EFD") == (13, 110, 253)
        assert hex_to_rgb_tuple("FFFFFF") == (255, 255, 255)


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

class TestLoader:
    def test_default_filename_plain(self):
        assert default_filename("AI Basics", "pptx") == "AI Basics.pptx"

    @pytest.mark.parametrize("title, expected", [
        ("AI/ML Basics", "AI_ML Basics.pdf"),
        ("C:\\temp\\deck", "C_temp_deck.pdf"),
        ("What? <Why> \"Now\"|", "What_ _Why_ _Now_.pdf"),
        ("..", "presentation.pdf"),
        ("", "presentation.pdf"),
    ])
    def test_default_filename_sanitized(self, title, expected):
        assert default_filename(title, "pdf") == expected

    def test_json_round_trip(self, tmp_path, two_slide_document):
        path = tmp_path / "deck.json"
        save_document(two_slide_document, path)
        assert load_document(path) == two_slide_document

    def test_yaml_round_trip(self, tmp_path, two_slide_document):
        path = tmp_path / "nested" / "deck.yaml"
        save_document(two_slide_document, path)
        assert path.exists()
        assert load_document(path) == two_slide_document

    def test_json_uses_camel_case(self, tmp_path, two_slide_document):
        path = tmp_path / "deck.json"
        save_document(two_slide_document, path)
        assert '"speakerNotes"' in path.read_text()


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

class TestSettings:
    def test_defaults(self):
        s = Settings()
        assert s.image_host == "picsum.photos"
        assert (s.canvas_width, s.canvas_height) == (1280, 720)

    def test_from_dict_ignores_unknown(self):
        s = Settings.from_dict({"image_host": "img.test", "bogus": 1})
        assert s.image_host == "img.test"

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("image_host: img.test\ncapture_scale: 1\n")
        s = load_settings(path)
        assert s.image_host == "img.test"
        assert s.capture_scale == 1

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("SLIDEFORGE_IMAGE_HOST", "env.test")
        monkeypatch.setenv("SLIDEFORGE_FETCH_TIMEOUT", "3.5")
        s = load_settings()
        assert s.image_host == "env.test"
        assert s.fetch_timeout == pytest.approx(3.5)
