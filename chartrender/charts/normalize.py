"""Turn a chart request into the complete chart.js configuration.

Defaults are layered in a fixed order:

1. the caller's options (deep-copied, never mutated);
2. sparkline rewrite (single bare line, hidden axes, padded y range);
3. zero-based y axis for cartesian charts without ``scales``;
4. palette colors for datasets without ``backgroundColor``;
5. straight line segments for line charts;
6. data-label plugin default (on for pie/doughnut only);
7. rough plugin block from the request's sketch parameters;
8. animations forced off.

The caller's options win over every default except step 8: a still image
needs the single final frame.
"""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass
from typing import Any

from loguru import logger

from chartrender.charts.errors import InvalidConfiguration
from chartrender.charts.types import SPARKLINE, ChartRequest, NormalizedChartConfig

DEFAULT_COLORS: dict[str, str] = {
    "blue": "#4D89F9",
    "green": "#00B88A",
    "orange": "rgb(255, 159, 64)",
    "red": "rgb(255, 99, 132)",
    "purple": "rgb(153, 102, 255)",
    "yellow": "#fc3",
    "grey": "rgb(201, 203, 207)",
}

# Rendered as one sector per data point. The outlabeled variants belong to
# chartjs-plugin-piechart-outlabels, which the page does not load yet.
ROUND_CHART_TYPES = frozenset({"pie", "doughnut", "polarArea", "outlabeledPie", "outlabeledDoughnut"})

ZERO_BASED_CHART_TYPES = frozenset({"bar", "line", "scatter", "bubble"})
DATALABEL_CHART_TYPES = frozenset({"pie", "doughnut"})

SPARKLINE_PADDING = 0.05


@dataclass(frozen=True)
class NormalizerDefaults:
    color_wheel: tuple[str, ...] = tuple(DEFAULT_COLORS.values())
    round_types: frozenset[str] = ROUND_CHART_TYPES


DEFAULT_NORMALIZER = NormalizerDefaults()


def normalize_chart(
    request: ChartRequest,
    defaults: NormalizerDefaults = DEFAULT_NORMALIZER,
) -> NormalizedChartConfig:
    """Return the chart.js config for *request*.

    Raises :class:`InvalidConfiguration` for a sparkline without exactly one
    dataset.
    """
    chart_type = request.type
    data = copy.deepcopy(request.data)
    options = copy.deepcopy(request.options) if request.options else {}
    logger.debug(f"ChartNormalizer >>> {_dump(chart_type, data, options)}")

    if chart_type == SPARKLINE:
        chart_type = _apply_sparkline_defaults(data, options)

    if chart_type in ZERO_BASED_CHART_TYPES and options.get("scales") is None:
        options["scales"] = {"yAxes": [{"ticks": {"beginAtZero": True}}]}

    datasets = _datasets(data)
    _assign_background_colors(chart_type, datasets, defaults)

    if chart_type == "line":
        for dataset in datasets:
            if dataset.get("lineTension") is None and dataset.get("tension") is None:
                dataset["lineTension"] = 0

    plugins = _as_dict(options.get("plugins"))
    if plugins.get("datalabels") is None:
        plugins["datalabels"] = {"display": chart_type in DATALABEL_CHART_TYPES}
    plugins["rough"] = request.rough_options()
    options["plugins"] = plugins

    options["animation"] = {**_as_dict(options.get("animation")), "duration": 0}
    options["hover"] = {**_as_dict(options.get("hover")), "animationDuration": 0}
    options["responsiveAnimationDuration"] = 0

    config = NormalizedChartConfig(type=chart_type, data=data, options=options)
    logger.debug(f"ChartNormalizer <<< {_dump(chart_type, data, options)}")
    return config


# ── Layers ──────────────────────────────────────────────


def _apply_sparkline_defaults(data: dict[str, Any], options: dict[str, Any]) -> str:
    datasets = data.get("datasets") or []
    if not isinstance(datasets, list):
        raise InvalidConfiguration('"sparkline" datasets must be a list')
    if len(datasets) > 1:
        raise InvalidConfiguration(
            '"sparkline" only supports 1 line. Use "line" chart type for multiple lines.'
        )
    if not datasets or not isinstance(datasets[0], dict):
        raise InvalidConfiguration('"sparkline" requires exactly 1 dataset')

    series = datasets[0].get("data") or []
    if data.get("labels") is None:
        data["labels"] = [""] * len(series)

    if options.get("legend") is None:
        options["legend"] = {"display": False}

    elements = options["elements"] = _as_dict(options.get("elements"))
    if elements.get("line") is None:
        elements["line"] = {"borderColor": "#000", "borderWidth": 1}
    if elements.get("point") is None:
        elements["point"] = {"radius": 0}

    scales = options["scales"] = _as_dict(options.get("scales"))
    if scales.get("xAxes") is None:
        scales["xAxes"] = [{"display": False}]
    if scales.get("yAxes") is None:
        y_axis: dict[str, Any] = {"display": False}
        bounds = _padded_bounds(series)
        if bounds is not None:
            y_axis["ticks"] = {"min": bounds[0], "max": bounds[1]}
        scales["yAxes"] = [y_axis]

    return "line"


def _padded_bounds(series: list[Any]) -> tuple[float, float] | None:
    """Series [min, max] widened so the extreme points are not clipped at the edge."""
    values = [v for v in series if isinstance(v, (int, float)) and not isinstance(v, bool)]
    if not values:
        return None
    low, high = min(values), max(values)
    if low == high == 0:
        # padding by magnitude leaves an empty range around zero
        return -1.0, 1.0
    return low - abs(low) * SPARKLINE_PADDING, high + abs(high) * SPARKLINE_PADDING


def _assign_background_colors(
    chart_type: str,
    datasets: list[dict[str, Any]],
    defaults: NormalizerDefaults,
) -> None:
    wheel = defaults.color_wheel
    for dataset_idx, dataset in enumerate(datasets):
        if dataset.get("backgroundColor"):
            continue
        points = dataset.get("data") or []
        if chart_type in defaults.round_types and points:
            # one color per sector
            dataset["backgroundColor"] = [wheel[i % len(wheel)] for i in range(len(points))]
        else:
            dataset["backgroundColor"] = wheel[dataset_idx % len(wheel)]


# ── Helpers ─────────────────────────────────────────────


def _datasets(data: dict[str, Any]) -> list[dict[str, Any]]:
    datasets = data.get("datasets")
    if not isinstance(datasets, list):
        return []
    return [d for d in datasets if isinstance(d, dict)]


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _dump(chart_type: str, data: dict[str, Any], options: dict[str, Any]) -> str:
    return json.dumps({"type": chart_type, "data": data, "options": options}, default=str)
