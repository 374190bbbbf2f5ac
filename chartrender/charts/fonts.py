"""Web font helpers: parse the requested families and build the stylesheet URL."""

from __future__ import annotations

GOOGLE_FONTS_CSS_URL = "https://fonts.googleapis.com/css"


def parse_font_families(font_family: str | None) -> list[str]:
    """Split a CSS-style comma-separated family list, e.g. ``"Indie Flower, Roboto"``."""
    if not font_family:
        return []
    return [font.strip() for font in font_family.split(",") if font.strip()]


def font_stylesheet_url(families: list[str], base_url: str = GOOGLE_FONTS_CSS_URL) -> str | None:
    """Return the Google Fonts stylesheet URL loading every family, or None."""
    if not families:
        return None
    return f"{base_url}?family=" + "|".join(font.replace(" ", "+") for font in families)
