"""Theme registry — the single table of visual parameters per theme.

Both the on-screen view model and the PPTX exporter read colours, fonts and
default layouts from ``THEMES``; nothing else defines theme values.

Colours are stored as ``#RRGGBB`` hex strings.
"""

from dataclasses import dataclass

from .models import SlideLayout, SlideTheme


@dataclass(frozen=True)
class Theme:
    """Visual parameter bundle for one theme key."""
    key: SlideTheme
    label: str
    title_color: str
    content_color: str
    background_color: str
    overlay_color: str
    overlay_opacity: float
    title_font: str
    content_font: str
    default_layout: SlideLayout

    def to_dict(self) -> dict:
        return {
            "key": self.key.value,
            "label": self.label,
            "colors": {
                "title": self.title_color,
                "content": self.content_color,
                "background": self.background_color,
                "overlay": self.overlay_color,
            },
            "overlay_opacity": self.overlay_opacity,
            "fonts": {"title": self.title_font, "content": self.content_font},
            "default_layout": self.default_layout.value,
        }


_OVERLAY_OPACITY = 0.8


THEMES: dict[SlideTheme, Theme] = {
    SlideTheme.CORPORATE: Theme(
        key=SlideTheme.CORPORATE,
        label="Corporate",
        title_color="#0D6EFD",
        content_color="#343A40",
        background_color="#FFFFFF",
        overlay_color="#FFFFFF",
        overlay_opacity=_OVERLAY_OPACITY,
        title_font="Inter",
        content_font="Lato",
        default_layout=SlideLayout.IMAGE_LEFT,
    ),
    SlideTheme.PROFESSIONAL: Theme(
        key=SlideTheme.PROFESSIONAL,
        label="Professional",
        title_color="#0A2540",       # Dark navy
        content_color="#333333",
        background_color="#FFFFFF",
        overlay_color="#FFFFFF",
        overlay_opacity=_OVERLAY_OPACITY,
        title_font="Helvetica",
        content_font="Helvetica",
        default_layout=SlideLayout.IMAGE_LEFT,
    ),
    SlideTheme.CREATIVE: Theme(
        key=SlideTheme.CREATIVE,
        label="Creative",
        title_color="#006A4E",
        content_color="#333333",
        background_color="#E6F4EA",
        overlay_color="#E6F4EA",
        overlay_opacity=_OVERLAY_OPACITY,
        title_font="Playfair Display",
        content_font="Lato",
        default_layout=SlideLayout.IMAGE_LEFT,
    ),
    SlideTheme.MINIMALIST: Theme(
        key=SlideTheme.MINIMALIST,
        label="Minimalist",
        title_color="#000000",
        content_color="#333333",
        background_color="#FFFFFF",
        overlay_color="#FFFFFF",
        overlay_opacity=_OVERLAY_OPACITY,
        title_font="Inter",
        content_font="Inter",
        default_layout=SlideLayout.TEXT_ONLY,
    ),
    SlideTheme.VIBRANT: Theme(
        key=SlideTheme.VIBRANT,
        label="Vibrant",
        title_color="#4C0099",
        content_color="#333333",
        background_color="#F3E8FF",
        overlay_color="#F3E8FF",
        overlay_opacity=_OVERLAY_OPACITY,
        title_font="Montserrat",
        content_font="Lato",
        default_layout=SlideLayout.IMAGE_RIGHT,
    ),
}


def get_theme(key: SlideTheme | str | None) -> Theme:
    """Look up a theme; unknown or missing keys resolve to corporate."""
    if key is None:
        return THEMES[SlideTheme.CORPORATE]
    return THEMES[SlideTheme.coerce(key)]


def theme_options() -> list[tuple[str, str]]:
    """(value, label) pairs for theme pickers, corporate first."""
    return [(t.key.value, t.label) for t in THEMES.values()]


def hex_to_rgb_tuple(hex_color: str) -> tuple[int, int, int]:
    """Convert '#RRGGBB' into an (r, g, b) tuple."""
    h = hex_color.lstrip("#")
    return tuple(bytes.fromhex(h))
