"""CLI entry point for SlideForge.

Orchestrates the document pipeline: normalizing raw model output, exporting
PPTX or PDF files, validating exported decks, and inspecting documents.

Usage::

    # Normalize a raw model response into a document
    python -m slideforge.cli normalize \\
        --input response.txt \\
        --output output/deck.json

    # Export a PPTX, fetching external images first
    python -m slideforge.cli export \\
        --document output/deck.json \\
        --format pptx --inline-images \\
        --output output/deck.pptx

    # Export a PDF with a different theme
    python -m slideforge.cli export \\
        --document output/deck.json --format pdf --theme vibrant

    # Validate an existing PPTX against its document
    python -m slideforge.cli validate \\
        --document output/deck.json --pptx output/deck.pptx

    # Inspect a document
    python -m slideforge.cli inspect --document output/deck.json -v
"""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

from slideforge.config import load_settings, set_settings
from slideforge.errors import SlideForgeError
from slideforge.generator.pptx_builder import DeckBuilder
from slideforge.generator.raster import RasterExporter
from slideforge.generator.viewer import ViewMode
from slideforge.processor.images import inline_images
from slideforge.processor.normalizer import normalize_response
from slideforge.qa.validator import DeckValidator
from slideforge.schema.layout import effective_layout
from slideforge.schema.loader import default_filename, load_document, save_document
from slideforge.schema.models import SlideTheme
from slideforge.schema.themes import get_theme


# ---------------------------------------------------------------------------
# Document loading
# ---------------------------------------------------------------------------

def _load_document(args):
    """Load a PresentationData from --document."""
    path = Path(args.document)
    if not path.exists():
        _error(f"Document file not found: {path}")
    return load_document(path)


def _active_theme(args, document):
    """--theme overrides the document's own theme."""
    return get_theme(getattr(args, "theme", None) or document.theme)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_normalize(args):
    """Normalize a raw model response into a document file."""
    source = Path(args.input)
    if not source.exists():
        _error(f"Input file not found: {source}")

    try:
        document = normalize_response(source.read_text(encoding="utf-8"))
    except SlideForgeError as e:
        _error(e.message)

    save_document(document, args.output)
    _info(f"Normalized: {document.title!r} ({len(document.slides)} slides, "
          f"theme={document.theme.value})")
    _info(f"Written: {args.output}")


def cmd_export(args):
    """Export a document to PPTX or PDF."""
    document = _load_document(args)
    theme = _active_theme(args, document)
    _info(f"Document: {document.title} ({len(document.slides)} slides, "
          f"theme={theme.key.value})")

    if args.inline_images:
        _info("Fetching images...")
        inlined = asyncio.run(inline_images(document))
        for failure in inlined.failures:
            _warn(f"{failure.message} ({failure.url})")
        document = inlined.document

    suffix = "pptx" if args.format == "pptx" else "pdf"
    output = Path(args.output) if args.output else Path(default_filename(document.title, suffix))
    output.parent.mkdir(parents=True, exist_ok=True)

    if args.format == "pptx":
        _info("Building PPTX...")
        builder = DeckBuilder(theme)
        data = builder.build(document)
        for failure in builder.failures:
            _warn(failure.message)

        if not args.skip_qa:
            _info("Running QA validation...")
            qa_result = DeckValidator(document, theme).validate(data)
            if qa_result.passed:
                _info(qa_result.summary())
            else:
                _warn(qa_result.summary())
                if args.verbose:
                    print(qa_result.report(), file=sys.stderr)
                if not args.force:
                    _error("QA validation failed. Use --force to write anyway, "
                           "or --skip-qa to skip validation.")
    else:
        _info("Capturing slides...")
        exporter = RasterExporter(theme)
        try:
            result = exporter.export(
                document, mode=ViewMode(args.mode),
                on_failure=lambda f: _warn(f"Error processing slide "
                                           f"{f.index + 1}: {f.message}"),
            )
        except SlideForgeError as e:
            _error(e.message)
        data = result.pdf

    output.write_bytes(data)
    _info(f"Written: {output} ({len(data):,} bytes)")


def cmd_validate(args):
    """Validate an existing PPTX against its document."""
    document = _load_document(args)
    pptx_path = Path(args.pptx)
    if not pptx_path.exists():
        _error(f"PPTX file not found: {pptx_path}")

    _info(f"Validating {pptx_path} against {document.title!r}")
    validator = DeckValidator(document, _active_theme(args, document))
    qa_result = validator.validate(pptx_path.read_bytes())

    print(qa_result.report())
    sys.exit(0 if qa_result.passed else 1)


def cmd_inspect(args):
    """Show document information."""
    document = _load_document(args)
    theme = get_theme(document.theme)

    print(f"Title:   {document.title}")
    print(f"Theme:   {theme.key.value} ({theme.label})")
    print(f"Slides:  {len(document.slides)}")

    if args.verbose:
        print()
        for idx, slide in enumerate(document.slides):
            marker = " (welcome)" if slide.synthetic else ""
            image = "image" if slide.image and slide.image.url else "no image"
            print(f"  [{idx:2d}] {slide.title}{marker}"
                  f"  {effective_layout(slide, theme).value}"
                  f"  {image}")


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------

def _info(msg):
    print(f"  {msg}", file=sys.stderr)


def _warn(msg):
    print(f"  WARNING: {msg}", file=sys.stderr)


def _error(msg):
    print(f"  ERROR: {msg}", file=sys.stderr)
    sys.exit(1)


def _configure_logging(verbose: bool) -> None:
    level = "DEBUG" if verbose else os.environ.get("SLIDEFORGE_LOG_LEVEL", "WARNING")
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def build_parser():
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="slideforge",
        description="Normalize AI-generated presentations and export them.",
    )
    parser.add_argument(
        "--config",
        help="Path to a YAML settings file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # ---- normalize ----
    norm = subparsers.add_parser(
        "normalize",
        help="Turn a raw model response into a document file.",
    )
    norm.add_argument(
        "-i", "--input",
        required=True,
        help="Text file holding the raw model response.",
    )
    norm.add_argument(
        "-o", "--output",
        required=True,
        help="Output document path (.json or .yaml).",
    )
    _add_verbose_arg(norm)
    norm.set_defaults(func=cmd_normalize)

    # ---- export ----
    exp = subparsers.add_parser(
        "export",
        help="Export a document as PPTX or PDF.",
    )
    _add_document_args(exp)
    exp.add_argument(
        "--format",
        choices=["pptx", "pdf"],
        default="pptx",
        help="Output format (default: pptx).",
    )
    exp.add_argument(
        "-o", "--output",
        help="Output file path (default: <title>.<format>).",
    )
    exp.add_argument(
        "--inline-images",
        action="store_true",
        default=False,
        help="Fetch external images and embed them before exporting.",
    )
    exp.add_argument(
        "--mode",
        choices=[m.value for m in ViewMode],
        default=ViewMode.PREVIEW.value,
        help="View mode to capture for PDF export (default: preview).",
    )
    exp.add_argument(
        "--skip-qa",
        action="store_true",
        default=False,
        help="Skip QA validation after PPTX generation.",
    )
    exp.add_argument(
        "--force",
        action="store_true",
        default=False,
        help="Write output even if QA validation fails.",
    )
    _add_verbose_arg(exp)
    exp.set_defaults(func=cmd_export)

    # ---- validate ----
    val = subparsers.add_parser(
        "validate",
        help="Validate an existing PPTX against its document.",
    )
    _add_document_args(val)
    val.add_argument(
        "--pptx",
        required=True,
        help="Path to the PPTX file to validate.",
    )
    _add_verbose_arg(val)
    val.set_defaults(func=cmd_validate)

    # ---- inspect ----
    insp = subparsers.add_parser(
        "inspect",
        help="Show document structure.",
    )
    insp.add_argument(
        "--document",
        required=True,
        help="Path to a document file (.json or .yaml).",
    )
    _add_verbose_arg(insp, help_text="Show per-slide detail.")
    insp.set_defaults(func=cmd_inspect)

    return parser


def _add_document_args(parser):
    """Add --document / --theme args to a subparser."""
    parser.add_argument(
        "--document",
        required=True,
        help="Path to a document file (.json or .yaml).",
    )
    parser.add_argument(
        "--theme",
        choices=[t.value for t in SlideTheme],
        help="Theme to render with (default: the document's theme).",
    )


def _add_verbose_arg(parser, help_text="Show detailed output."):
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False,
        help=help_text,
    )


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv=None):
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(getattr(args, "verbose", False))
    if args.config:
        set_settings(load_settings(args.config))
    args.func(args)


if __name__ == "__main__":
    main()
