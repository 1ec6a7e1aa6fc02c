"""SlideForge — normalize AI-generated presentations and export them as PPTX or PDF."""

__version__ = "0.1.0"
