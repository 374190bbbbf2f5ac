import json

from fastapi.testclient import TestClient

from chartrender.api.app import create_app
from chartrender.charts import (
    ChartRequest,
    RenderedImage,
    RenderSurfaceFailure,
    RenderTimeout,
    get_renderer,
    normalize_chart,
)

PNG = b"\x89PNG\r\n\x1a\nfake"


class FakeRenderer:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.requests: list[ChartRequest] = []

    async def render(self, request: ChartRequest, *, timeout_ms: int | None = None) -> RenderedImage:
        self.requests.append(request)
        normalize_chart(request)
        if self.error is not None:
            raise self.error
        return RenderedImage(body=PNG, width=request.width, height=request.height, scale=request.device_scale_factor)


def _client(renderer: FakeRenderer) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_renderer] = lambda: renderer
    return TestClient(app)


def test_health() -> None:
    resp = _client(FakeRenderer()).get("/health")

    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_post_chart_returns_png() -> None:
    renderer = FakeRenderer()

    resp = _client(renderer).post(
        "/api/v1/chart",
        json={"type": "donut", "data": {"datasets": [{"data": [1, 2]}]}, "fontFamily": "Roboto"},
    )

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "image/png"
    assert resp.content == PNG
    (request,) = renderer.requests
    assert request.type == "doughnut"
    assert request.font_family == "Roboto"


def test_get_chart_reads_request_from_query() -> None:
    renderer = FakeRenderer()
    chart = {"type": "bar", "data": {"datasets": [{"data": [1, 2, 3]}]}, "width": 300}

    resp = _client(renderer).get("/api/v1/chart", params={"c": json.dumps(chart)})

    assert resp.status_code == 200
    assert resp.content == PNG
    assert renderer.requests[0].width == 300


def test_get_chart_with_malformed_json_is_400() -> None:
    resp = _client(FakeRenderer()).get("/api/v1/chart", params={"c": "{not json"})

    assert resp.status_code == 400


def test_unknown_chart_type_is_422() -> None:
    client = _client(FakeRenderer())

    assert client.post("/api/v1/chart", json={"type": "histogram", "data": {}}).status_code == 422
    resp = client.get("/api/v1/chart", params={"c": json.dumps({"type": "histogram", "data": {}})})
    assert resp.status_code == 422


def test_invalid_sparkline_is_400() -> None:
    resp = _client(FakeRenderer()).post("/api/v1/chart", json={"type": "sparkline", "data": {"datasets": []}})

    assert resp.status_code == 400
    assert "sparkline" in resp.json()["detail"]


def test_render_timeout_is_504() -> None:
    renderer = FakeRenderer(error=RenderTimeout("chart did not signal readiness within 10ms"))

    resp = _client(renderer).post("/api/v1/chart", json={"type": "bar", "data": {"datasets": [{"data": [1]}]}})

    assert resp.status_code == 504
    assert "readiness" in resp.json()["detail"]


def test_surface_failure_is_502() -> None:
    renderer = FakeRenderer(error=RenderSurfaceFailure("could not launch Chromium"))

    resp = _client(renderer).post("/api/v1/chart", json={"type": "bar", "data": {"datasets": [{"data": [1]}]}})

    assert resp.status_code == 502
