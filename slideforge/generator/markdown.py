"""Minimal markdown flattening for slide content.

Only two constructs are recognised: lines starting with ``-`` or ``*`` in
the first column and followed by whitespace become bullets (marker
stripped), everything else is a plain paragraph.  Indented markers are not
bullets.  Blank lines are dropped.  Emphasis, headings and nested lists are
passed through as literal text.
"""

import re
from dataclasses import dataclass

_BULLET_RE = re.compile(r"^[-*]\s+(.*)$")


@dataclass(frozen=True)
class TextRun:
    """One output paragraph."""
    text: str
    bullet: bool = False


def parse_markdown(content: str | None) -> list[TextRun]:
    """Flatten markdown content into paragraph runs, line by line."""
    if not content:
        return []
    runs: list[TextRun] = []
    for line in content.split("\n"):
        if not line.strip():
            continue
        match = _BULLET_RE.match(line)
        if match:
            runs.append(TextRun(match.group(1).rstrip(), bullet=True))
        else:
            runs.append(TextRun(line.strip()))
    return runs
