"""Data model for chart rendering: requests in, configs and PNGs out."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from chartrender.charts.fonts import parse_font_families


class ChartType(str, Enum):
    LINE = "line"
    BAR = "bar"
    HORIZONTAL_BAR = "horizontalBar"
    RADAR = "radar"
    DONUT = "donut"
    DOUGHNUT = "doughnut"
    POLAR_AREA = "polarArea"
    BUBBLE = "bubble"
    PIE = "pie"
    SCATTER = "scatter"
    RADIAL_GAUGE = "radialGauge"


# Not part of the public enum; rewritten to a bare "line" chart by the normalizer.
SPARKLINE = "sparkline"

_TYPE_ALIASES = {ChartType.DONUT.value: ChartType.DOUGHNUT.value}
_ACCEPTED_TYPES = frozenset(t.value for t in ChartType) | {SPARKLINE}


class RenderStyle(str, Enum):
    NORMAL = "normal"
    ROUGH = "rough"


class RoughFillStyle(str, Enum):
    HACHURE = "hachure"
    SOLID = "solid"
    ZIGZAG = "zigzag"
    CROSS_HATCH = "cross-hatch"
    DOTS = "dots"
    STARBURST = "starburst"
    DASHED = "dashed"
    ZIGZAG_LINE = "zigzag-line"


class ChartRequest(BaseModel):
    """A chart to render.

    ``data`` and ``options`` follow chart.js 2.x. Field names are accepted in
    snake_case and in camelCase (``deviceScaleFactor``, ``fontFamily``, ...).
    The sketch parameters only matter with ``style="rough"``; see
    https://github.com/pshihn/rough/wiki#options for their meaning.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: str
    data: dict[str, Any]
    options: dict[str, Any] | None = None

    # output geometry
    width: int = Field(512, gt=0)
    height: int = Field(320, gt=0)
    device_scale_factor: float = Field(2, gt=0)

    # typography
    font_family: str | None = None
    font_size: float = Field(12, gt=0)
    font_color: str = "#666"
    font_style: str = "normal"

    # sketch style
    style: RenderStyle = RenderStyle.ROUGH
    roughness: float = 1
    bowing: float = 1
    fill_style: RoughFillStyle = RoughFillStyle.HACHURE
    fill_weight: float = 0.5
    hachure_angle: float = -41
    hachure_gap: float = 4
    curve_step_count: int = 9
    simplification: float = 9

    @field_validator("type", mode="before")
    @classmethod
    def _canonical_type(cls, value: Any) -> Any:
        if isinstance(value, Enum):
            value = value.value
        if isinstance(value, str):
            value = _TYPE_ALIASES.get(value, value)
            if value not in _ACCEPTED_TYPES:
                raise ValueError(f"unsupported chart type: {value!r}")
        return value

    @property
    def font_families(self) -> list[str]:
        return parse_font_families(self.font_family)

    def rough_options(self) -> dict[str, Any]:
        """The ``plugins.rough`` block handed to chartjs-plugin-rough."""
        return {
            "roughness": self.roughness,
            "bowing": self.bowing,
            "fillStyle": self.fill_style.value,
            "fillWeight": self.fill_weight,
            "hachureAngle": self.hachure_angle,
            "hachureGap": self.hachure_gap,
            "curveStepCount": self.curve_step_count,
            "simplification": self.simplification,
        }


@dataclass(frozen=True)
class NormalizedChartConfig:
    """Exactly what ``new Chart(ctx, config)`` receives."""

    type: str
    data: dict[str, Any]
    options: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "data": self.data, "options": self.options}


@dataclass(frozen=True)
class RenderedImage:
    """A rendered PNG wrapped in an HTTP-style envelope."""

    body: bytes
    width: int
    height: int
    scale: float
    status_code: int = 200
    headers: dict[str, str] = field(default_factory=lambda: {"Content-Type": "image/png"})

    @property
    def content_type(self) -> str:
        return self.headers.get("Content-Type", "image/png")

    def save(self, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.body)
        return path
