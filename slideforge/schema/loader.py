"""Document loader — JSON/YAML serialization for PresentationData.

Lets a normalized presentation be saved, reviewed, hand-edited and fed back
into the exporters.  ``.yaml``/``.yml`` paths use YAML; anything else is JSON.
"""

import json
import re
from pathlib import Path

import yaml

from .models import PresentationData

_YAML_SUFFIXES = {".yaml", ".yml"}
_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]+')
_FALLBACK_STEM = "presentation"


def default_filename(title: str, suffix: str) -> str:
    """``<title>.<suffix>`` with path separators and reserved characters replaced."""
    stem = _UNSAFE_FILENAME_CHARS.sub("_", title or "").strip(" .")
    return f"{stem or _FALLBACK_STEM}.{suffix}"


def save_document(document: PresentationData, path: str | Path) -> None:
    """Serialize a PresentationData to a JSON or YAML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = document.to_dict()
    with open(path, "w", encoding="utf-8") as f:
        if path.suffix.lower() in _YAML_SUFFIXES:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False,
                      allow_unicode=True, width=120)
        else:
            json.dump(data, f, indent=2, ensure_ascii=False)


def load_document(path: str | Path) -> PresentationData:
    """Deserialize a PresentationData from a JSON or YAML file."""
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        if path.suffix.lower() in _YAML_SUFFIXES:
            data = yaml.safe_load(f)
        else:
            data = json.load(f)
    return PresentationData.from_dict(data)
