"""Centralised settings for chartrender, loaded from env / .env."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# chart.js 2.x and the plugins built against it; order matters (rough.js
# before its chart.js plugin).
DEFAULT_SCRIPT_URLS: tuple[str, ...] = (
    "https://cdnjs.cloudflare.com/ajax/libs/fontfaceobserver/2.1.0/fontfaceobserver.standalone.js",
    "https://cdnjs.cloudflare.com/ajax/libs/Chart.js/2.9.3/Chart.bundle.min.js",
    "https://cdn.jsdelivr.net/npm/roughjs@3.1.0/dist/rough.min.js",
    "https://cdn.jsdelivr.net/npm/chartjs-plugin-rough@0.2.0/dist/chartjs-plugin-rough.min.js",
    "https://cdn.jsdelivr.net/npm/chartjs-plugin-annotation@0.5.7/src/index.min.js",
    "https://cdn.jsdelivr.net/npm/chartjs-plugin-datalabels@0.7.0/dist/chartjs-plugin-datalabels.min.js",
    "https://cdn.jsdelivr.net/npm/chartjs-chart-radial-gauge@1.0.3/build/Chart.RadialGauge.cjs.min.js",
)


class ChartRenderSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CHARTRENDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- general ---
    app_name: str = "chartrender"
    debug: bool = False

    # --- HTTP ---
    host: str = "0.0.0.0"
    port: int = 8080

    # --- browser ---
    render_timeout_ms: int = Field(15_000, gt=0)
    max_pages: int = Field(4, gt=0)
    browser_args: list[str] = Field(
        default_factory=lambda: [
            "--no-sandbox",
            "--disable-setuid-sandbox",
            "--disable-dev-shm-usage",
            "--disable-gpu",
        ]
    )

    # --- page assets ---
    font_service_url: str = "https://fonts.googleapis.com/css"
    script_urls: list[str] = Field(default_factory=lambda: list(DEFAULT_SCRIPT_URLS))

    # --- output ---
    output_dir: Path = Field(default_factory=lambda: Path("/tmp/chartrender"))


@lru_cache
def get_settings() -> ChartRenderSettings:
    return ChartRenderSettings()
