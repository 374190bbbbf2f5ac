import json
import re

from chartrender.charts.fonts import font_stylesheet_url, parse_font_families
from chartrender.charts.normalize import normalize_chart
from chartrender.charts.page import build_page
from chartrender.charts.types import ChartRequest
from chartrender.settings import ChartRenderSettings, DEFAULT_SCRIPT_URLS


def _page(**kwargs) -> str:
    request = ChartRequest.model_validate({"type": "bar", "data": {"datasets": [{"data": [1, 2, 3]}]}, **kwargs})
    return build_page(request, normalize_chart(request), ChartRenderSettings())


def _embedded_config(html: str) -> dict:
    match = re.search(r"const chartConfig = (.*);\n", html)
    assert match is not None
    return json.loads(match.group(1))


def test_parse_font_families_trims_and_drops_blanks() -> None:
    assert parse_font_families(" Indie Flower, Roboto ,, ") == ["Indie Flower", "Roboto"]
    assert parse_font_families(None) == []
    assert parse_font_families("") == []


def test_font_stylesheet_url_joins_families() -> None:
    url = font_stylesheet_url(["Indie Flower", "Roboto"])

    assert url == "https://fonts.googleapis.com/css?family=Indie+Flower|Roboto"
    assert font_stylesheet_url([]) is None


def test_page_embeds_normalized_config_and_canvas_geometry() -> None:
    html = _page(width=640, height=480)

    config = _embedded_config(html)
    assert config["type"] == "bar"
    assert config["data"]["datasets"][0]["backgroundColor"] == "#4D89F9"
    assert config["options"]["animation"] == {"duration": 0}
    assert '<canvas id="main" width="640" height="480"></canvas>' in html


def test_page_loads_every_script_in_order() -> None:
    html = _page()

    positions = [html.index(f'<script src="{url}"></script>') for url in DEFAULT_SCRIPT_URLS]
    assert positions == sorted(positions)


def test_rough_style_registers_rough_plugin() -> None:
    html = _page(style="rough")

    assert "Chart.plugins.register(ChartRough);" in html
    assert "plugins.push(ChartRough);" in html


def test_normal_style_registers_no_plugin() -> None:
    html = _page(style="normal")

    assert "Chart.plugins.register" not in html
    # the rough options block is still part of the config, just inert
    assert "roughness" in _embedded_config(html)["options"]["plugins"]["rough"]


def test_without_fonts_page_is_ready_immediately() -> None:
    html = _page()

    assert "fonts.googleapis.com" not in html
    assert "FontFaceObserver(" not in html
    assert "defaultFontFamily" not in html
    assert "\n  ready();" in html


def test_with_fonts_page_waits_for_every_face() -> None:
    html = _page(fontFamily="Indie Flower, Roboto", fontSize=14, fontColor="#123456", fontStyle="bold")

    assert '<link rel="stylesheet" href="https://fonts.googleapis.com/css?family=Indie+Flower|Roboto">' in html
    assert 'new FontFaceObserver("Indie Flower")' in html
    assert 'new FontFaceObserver("Roboto")' in html
    assert ".then(ready);" in html
    assert "\n  ready();" not in html
    assert 'Chart.defaults.global.defaultFontFamily = "Indie Flower, Roboto";' in html
    assert "Chart.defaults.global.defaultFontSize = 14.0;" in html
    assert 'Chart.defaults.global.defaultFontColor = "#123456";' in html
    assert 'Chart.defaults.global.defaultFontStyle = "bold";' in html


def test_page_ends_construction_with_ready_sentinel() -> None:
    html = _page()

    assert html.index("new Chart(ctx") < html.index('div.className = "ready";')


def test_config_cannot_close_the_script_tag() -> None:
    request = ChartRequest(type="bar", data={"labels": ["</script><b>x</b>"], "datasets": [{"data": [1]}]})

    html = build_page(request, normalize_chart(request), ChartRenderSettings())

    assert "</script><b>" not in html
    assert _embedded_config(html)["data"]["labels"] == ["</script><b>x</b>"]
