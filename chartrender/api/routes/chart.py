"""Chart API – render a chart.js chart to PNG.

POST takes the request as a JSON body; GET takes the same JSON in the ``c``
query parameter so charts can be embedded with a plain ``<img src=...>``.
"""

from __future__ import annotations

import json
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import ValidationError

from chartrender.charts import ChartRenderer, ChartRequest, RenderedImage, get_renderer

router = APIRouter()

RendererDep = Annotated[ChartRenderer, Depends(get_renderer)]

_PNG_RESPONSE = {200: {"content": {"image/png": {}}, "description": "The rendered chart."}}


def _png(image: RenderedImage) -> Response:
    return Response(content=image.body, status_code=image.status_code, headers=image.headers)


@router.post("", response_class=Response, responses=_PNG_RESPONSE)
async def render_chart_post(body: ChartRequest, renderer: RendererDep) -> Response:
    return _png(await renderer.render(body))


@router.get("", response_class=Response, responses=_PNG_RESPONSE)
async def render_chart_get(
    renderer: RendererDep,
    c: Annotated[str, Query(description="Chart request as JSON")],
) -> Response:
    try:
        payload = json.loads(c)
    except json.JSONDecodeError as exc:
        raise HTTPException(status_code=400, detail=f"c is not valid JSON: {exc}") from exc
    try:
        request = ChartRequest.model_validate(payload)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=json.loads(exc.json())) from exc
    return _png(await renderer.render(request))
