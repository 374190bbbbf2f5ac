"""Chart rendering engine: chart.js in headless Chromium via Playwright.

Public API
----------
- ``render_chart``   – render a chart request to PNG (async).
- ``normalize_chart`` – the chart.js config a request turns into (pure).
- ``ChartRenderer``  – the reusable headless renderer behind ``render_chart``.

Example::

    from chartrender.charts import render_chart

    image = await render_chart("pie", {"labels": ["a", "b"], "datasets": [{"data": [1, 2]}]})
"""

from chartrender.charts.errors import (
    ChartRenderError,
    InvalidConfiguration,
    RenderSurfaceFailure,
    RenderTimeout,
)
from chartrender.charts.normalize import normalize_chart
from chartrender.charts.renderer import ChartRenderer, get_renderer, render_chart, shutdown_renderer
from chartrender.charts.types import (
    ChartRequest,
    ChartType,
    NormalizedChartConfig,
    RenderedImage,
    RenderStyle,
    RoughFillStyle,
)

__all__ = [
    "ChartRenderError",
    "ChartRenderer",
    "ChartRequest",
    "ChartType",
    "InvalidConfiguration",
    "NormalizedChartConfig",
    "RenderStyle",
    "RenderSurfaceFailure",
    "RenderTimeout",
    "RenderedImage",
    "RoughFillStyle",
    "get_renderer",
    "normalize_chart",
    "render_chart",
    "shutdown_renderer",
]
