"""FastAPI application factory with lifespan for chartrender."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from chartrender import __version__
from chartrender.charts import InvalidConfiguration, RenderSurfaceFailure, RenderTimeout, shutdown_renderer
from chartrender.settings import get_settings

# Render failures mapped to HTTP status codes.
_ERROR_STATUS: dict[type[Exception], int] = {
    InvalidConfiguration: 400,
    RenderTimeout: 504,
    RenderSurfaceFailure: 502,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Shutdown: close the shared headless browser."""
    yield
    await shutdown_renderer()


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )

    for exc_type, status_code in _ERROR_STATUS.items():
        app.add_exception_handler(exc_type, _error_handler(status_code))

    # ── mount routers ──
    from chartrender.api.routes import chart, health

    app.include_router(health.router)
    app.include_router(chart.router, prefix="/api/v1/chart", tags=["chart"])

    return app


def _error_handler(status_code: int):
    async def handle(request: Request, exc: Exception) -> JSONResponse:
        logger.warning(f"Chart API: {request.method} {request.url.path} failed ({status_code}): {exc}")
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    return handle
