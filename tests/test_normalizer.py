"""Tests for the response normalizer."""

import io
import json

import pytest
from pptx import Presentation

from slideforge.errors import InvalidStructure, MalformedResponse
from slideforge.generator.pptx_builder import build_deck
from slideforge.processor.images import placeholder_prefix
from slideforge.processor.normalizer import (
    FALLBACK_PROMPT,
    MISSING_NOTES,
    WELCOME_CONTENT,
    assign_placeholder_images,
    extract_json,
    insert_welcome_slide,
    make_welcome_slide,
    normalize_document,
    normalize_response,
    repair_slide,
    repair_slides,
    validate_structure,
)
from slideforge.schema.models import Slide, SlideImage, SlideLayout, SlideTheme


def _doc(**overrides):
    doc = {
        "title": "AI Basics",
        "theme": "corporate",
        "slides": [
            {"title": "Intro", "content": "- point one\n- point two"},
            {
                "title": "History",
                "content": "Some history.",
                "layout": "image-right",
                "speakerNotes": "Talk about history.",
                "image": {"generationPrompt": "old computer room with tapes",
                          "url": "https://model.example/cat.png"},
            },
        ],
    }
    doc.update(overrides)
    return doc


# ---------------------------------------------------------------------------
# extract_json
# ---------------------------------------------------------------------------

class TestExtractJson:
    def test_plain_json(self):
        assert extract_json('{"a": 1}') == {"a": 1}

    def test_prose_and_fences(self):
        text = 'Sure! Here it is:\n```json\n{"a": {"b": [1, 2]}}\n```\nEnjoy.'
        assert extract_json(text) == {"a": {"b": [1, 2]}}

    def test_embedded_document_round_trip(self):
        doc = _doc()
        text = "Here is the deck you asked for:\n" + json.dumps(doc) + "\nThanks!"
        assert extract_json(text) == doc

    def test_no_braces(self):
        with pytest.raises(MalformedResponse):
            extract_json("I cannot help with that.")

    def test_only_open_brace(self):
        with pytest.raises(MalformedResponse):
            extract_json("here { is nothing")

    def test_close_before_open(self):
        with pytest.raises(MalformedResponse):
            extract_json("} backwards {")

    def test_invalid_json(self):
        with pytest.raises(MalformedResponse):
            extract_json("{title: 'no quotes'}")

    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
    def test_non_standard_constants_rejected(self, literal):
        with pytest.raises(MalformedResponse):
            extract_json('{"title": "A", "fontSize": ' + literal + "}")

    def test_none(self):
        with pytest.raises(MalformedResponse):
            extract_json(None)

    def test_malformed_message_distinct_from_structure(self):
        assert MalformedResponse().message != InvalidStructure().message


# ---------------------------------------------------------------------------
# validate_structure
# ---------------------------------------------------------------------------

class TestValidateStructure:
    def test_valid(self):
        validate_structure(_doc())

    def test_empty_slides_list_is_valid(self):
        validate_structure(_doc(slides=[]))

    @pytest.mark.parametrize("overrides", [
        {"title": ""},
        {"title": None},
        {"title": "   "},
        {"slides": "not a list"},
        {"slides": None},
        {"slides": ["just a string"]},
        {"theme": ""},
        {"theme": None},
    ])
    def test_invalid(self, overrides):
        with pytest.raises(InvalidStructure):
            validate_structure(_doc(**overrides))


# ---------------------------------------------------------------------------
# repair_slide
# ---------------------------------------------------------------------------

class TestRepairSlide:
    def test_missing_notes(self):
        assert repair_slide({"title": "A"})["speakerNotes"] == MISSING_NOTES

    def test_existing_notes_kept(self):
        assert repair_slide({"title": "A", "speakerNotes": "x"})["speakerNotes"] == "x"

    def test_empty_notes_kept(self):
        assert repair_slide({"title": "A", "speakerNotes": ""})["speakerNotes"] == ""

    def test_missing_image(self):
        assert repair_slide({"title": "A"})["image"] == {"generationPrompt": FALLBACK_PROMPT}

    @pytest.mark.parametrize("prompt", ["", "   ", None, 42, ["a"]])
    def test_bad_prompt(self, prompt):
        slide = repair_slide({"title": "A", "image": {"generationPrompt": prompt}})
        assert slide["image"]["generationPrompt"] == FALLBACK_PROMPT

    def test_image_without_prompt_key(self):
        slide = repair_slide({"title": "A", "image": {"url": "https://x/y.png"}})
        assert slide["image"]["generationPrompt"] == FALLBACK_PROMPT
        assert slide["image"]["url"] == "https://x/y.png"

    def test_missing_layout(self):
        assert repair_slide({"title": "A"})["layout"] == "text-only"

    def test_unknown_layout(self):
        assert repair_slide({"title": "A", "layout": "diagonal"})["layout"] == "text-only"

    def test_valid_layout_kept(self):
        assert repair_slide({"title": "A", "layout": "image-left"})["layout"] == "image-left"

    def test_content_list(self):
        slide = repair_slide({"title": "A", "content": ["one", "two"]})
        assert slide["content"] == "- one\n- two"

    def test_missing_title(self):
        assert repair_slide({"content": "x"}, position=2)["title"] == "Slide 3"

    def test_font_size_clamped(self):
        assert repair_slide({"title": "A", "fontSize": 99})["fontSize"] == 48
        assert repair_slide({"title": "A", "fontSize": 2})["fontSize"] == 8

    def test_bad_font_size_dropped(self):
        assert "fontSize" not in repair_slide({"title": "A", "fontSize": "big"})

    def test_does_not_mutate_input(self):
        raw = {"title": "A"}
        repair_slide(raw)
        assert raw == {"title": "A"}

    def test_synthetic_marker_stripped_after_first(self):
        slides = repair_slides([{"title": "A"}, {"title": "B", "synthetic": True}])
        assert "synthetic" not in slides[1]

    @pytest.mark.parametrize("marker", ["true", 1, "yes", False])
    def test_non_boolean_marker_dropped(self, marker):
        assert "synthetic" not in repair_slide({"title": "A", "synthetic": marker})

    @pytest.mark.parametrize("notes, expected", [
        (["a", "b"], "a\nb"),
        (42, "42"),
        (None, MISSING_NOTES),
    ])
    def test_non_text_notes_coerced(self, notes, expected):
        assert repair_slide({"title": "A", "speakerNotes": notes})["speakerNotes"] == expected

    @pytest.mark.parametrize("size", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_font_size_dropped(self, size):
        assert "fontSize" not in repair_slide({"title": "A", "fontSize": size})

    def test_valid_fields_unchanged(self):
        raw = {
            "title": "A", "content": "c", "layout": "image-left",
            "speakerNotes": "n", "image": {"generationPrompt": "p", "url": "u"},
        }
        assert repair_slide(raw) == raw


# ---------------------------------------------------------------------------
# Welcome slide and images
# ---------------------------------------------------------------------------

class TestWelcomeSlide:
    def test_make(self):
        slide = make_welcome_slide("Deck")
        assert slide.title == "Deck"
        assert slide.content == WELCOME_CONTENT
        assert slide.layout is SlideLayout.BACKGROUND_IMAGE
        assert slide.synthetic is True
        assert slide.image.url.endswith("/seed/welcome/1280/720")

    def test_insert_prepends(self):
        slides = insert_welcome_slide([Slide(title="A")], "Deck")
        assert [s.title for s in slides] == ["Deck", "A"]

    def test_insert_is_guarded(self):
        once = insert_welcome_slide([Slide(title="A")], "Deck")
        twice = insert_welcome_slide(once, "Deck")
        assert len(twice) == 2


class TestAssignPlaceholderImages:
    def test_overwrites_model_urls(self):
        slides = [make_welcome_slide("Deck"),
                  Slide(title="A", image=SlideImage("red apple tree orchard",
                                                    "https://model.example/x.png"))]
        welcome_url = slides[0].image.url
        assign_placeholder_images(slides)
        assert slides[0].image.url == welcome_url
        assert slides[1].image.url.startswith(placeholder_prefix())
        assert slides[1].image.url.endswith("/1280/720")
        assert "red%2Capple%2Ctree" in slides[1].image.url
        assert "orchard" not in slides[1].image.url

    def test_fill_only_keeps_existing(self):
        slides = [Slide(title="A", image=SlideImage("p", "https://keep.example/a.png")),
                  Slide(title="B", image=SlideImage("p"))]
        assign_placeholder_images(slides, overwrite=False)
        assert slides[0].image.url == "https://keep.example/a.png"
        assert slides[1].image.url.startswith(placeholder_prefix())

    def test_random_token_differs(self):
        slides = [Slide(title="A", image=SlideImage("same prompt")),
                  Slide(title="B", image=SlideImage("same prompt"))]
        assign_placeholder_images(slides)
        assert slides[0].image.url != slides[1].image.url


# ---------------------------------------------------------------------------
# Full pipeline
# ---------------------------------------------------------------------------

class TestNormalizeResponse:
    def test_worked_example(self):
        text = (
            "Here's your presentation:\n```json\n"
            + json.dumps({"title": "AI Basics", "theme": "corporate",
                          "slides": [{"title": "Intro",
                                      "content": "- point one\n- point two"}]})
            + "\n```"
        )
        doc = normalize_response(text)
        assert len(doc.slides) == 2
        assert doc.slides[0].title == "AI Basics"
        assert doc.slides[1].title == "Intro"
        assert doc.slides[1].speaker_notes == "No speaker notes were generated for this slide."
        assert doc.slides[1].layout is SlideLayout.TEXT_ONLY

    def test_welcome_slide_first(self):
        doc = normalize_document(_doc())
        assert doc.slides[0].layout is SlideLayout.BACKGROUND_IMAGE
        assert doc.slides[0].title == doc.title
        assert doc.slides[0].synthetic is True
        assert not any(s.synthetic for s in doc.slides[1:])

    def test_order_preserved(self):
        doc = normalize_document(_doc())
        assert [s.title for s in doc.slides] == ["AI Basics", "Intro", "History"]

    def test_every_prompt_non_empty(self):
        doc = normalize_document(_doc(slides=[
            {"title": "A", "image": {"generationPrompt": ""}},
            {"title": "B", "image": None},
            {"title": "C", "image": {"generationPrompt": 7}},
        ]))
        for slide in doc.slides:
            assert isinstance(slide.image.generation_prompt, str)
            assert slide.image.generation_prompt.strip()

    def test_model_url_never_trusted(self):
        doc = normalize_document(_doc())
        assert doc.slides[2].image.url != "https://model.example/cat.png"
        assert doc.slides[2].image.url.startswith(placeholder_prefix())

    def test_unknown_theme(self):
        assert normalize_document(_doc(theme="neon")).theme is SlideTheme.CORPORATE

    def test_empty_slides(self):
        doc = normalize_document(_doc(slides=[]))
        assert len(doc.slides) == 1
        assert doc.slides[0].synthetic is True

    def test_idempotent(self):
        first = normalize_document(_doc())
        second = normalize_document(first.to_dict())
        assert len(second.slides) == len(first.slides)
        assert second == first

    def test_structure_error_propagates(self):
        with pytest.raises(InvalidStructure):
            normalize_response('{"title": "x", "slides": []}')

    def test_malformed_propagates(self):
        with pytest.raises(MalformedResponse):
            normalize_response("no json at all")

    def test_model_welcome_marker_ignored(self):
        text = json.dumps({
            "title": "AI Basics",
            "theme": "corporate",
            "slides": [
                {"title": "Intro", "content": "x", "synthetic": True,
                 "image": {"generationPrompt": "robot", "url": "https://model.example/a.png"}},
                {"title": "Two", "content": "y"},
            ],
        })
        doc = normalize_response(text)
        assert [s.title for s in doc.slides] == ["AI Basics", "Intro", "Two"]
        assert doc.slides[0].layout is SlideLayout.BACKGROUND_IMAGE
        assert doc.slides[0].synthetic is True
        assert doc.slides[1].synthetic is False
        assert doc.slides[1].image.url.startswith(placeholder_prefix())

    def test_renormalize_honours_existing_welcome(self):
        first = normalize_document(_doc())
        again = normalize_document(first.to_dict())
        assert [s.title for s in again.slides] == [s.title for s in first.slides]

    def test_infinite_font_size_is_malformed(self):
        with pytest.raises(MalformedResponse):
            normalize_response('{"title": "A", "theme": "corporate", '
                               '"slides": [{"title": "B", "fontSize": Infinity}]}')

    def test_list_notes_export(self):
        doc = normalize_response(json.dumps({
            "title": "Deck", "theme": "corporate",
            "slides": [{"title": "A", "content": "x", "speakerNotes": ["a", "b"]}],
        }))
        assert doc.slides[1].speaker_notes == "a\nb"
        prs = Presentation(io.BytesIO(build_deck(doc)))
        assert prs.slides[2].notes_slide.notes_text_frame.text == "a\nb"
