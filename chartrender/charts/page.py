"""Build the self-contained HTML page that draws one chart.

The page loads chart.js and its plugins, waits for the requested web fonts,
constructs the chart on ``<canvas id="main">`` and finally appends a
``<div class="ready">`` sentinel the renderer waits for.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

import jinja2

from chartrender.charts.fonts import font_stylesheet_url
from chartrender.charts.types import ChartRequest, NormalizedChartConfig, RenderStyle
from chartrender.settings import ChartRenderSettings, get_settings

_TEMPLATES_DIR = Path(__file__).parent / "templates"

CANVAS_ID = "main"
READY_CLASS = "ready"


@dataclass(frozen=True)
class StyleVariant:
    """chart.js plugins (global JS names) a rendering style registers."""

    plugins: tuple[str, ...] = ()


STYLE_VARIANTS: dict[RenderStyle, StyleVariant] = {
    RenderStyle.NORMAL: StyleVariant(),
    RenderStyle.ROUGH: StyleVariant(plugins=("ChartRough",)),
}


@lru_cache
def _jinja_env() -> jinja2.Environment:
    return jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def build_page(
    request: ChartRequest,
    config: NormalizedChartConfig,
    settings: ChartRenderSettings | None = None,
) -> str:
    """Render the chart page for an already normalized *config*."""
    settings = settings or get_settings()
    fonts = request.font_families
    tpl = _jinja_env().get_template("chart.html")
    return tpl.render(
        chart=config.to_dict(),
        width=request.width,
        height=request.height,
        canvas_id=CANVAS_ID,
        ready_class=READY_CLASS,
        scripts=settings.script_urls,
        style_plugins=STYLE_VARIANTS[request.style].plugins,
        fonts=fonts,
        font_stylesheet=font_stylesheet_url(fonts, settings.font_service_url),
        font_family=request.font_family,
        font_size=request.font_size,
        font_color=request.font_color,
        font_style=request.font_style,
    )
