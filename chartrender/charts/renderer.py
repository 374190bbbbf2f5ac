"""Headless chart.js-to-PNG renderer using Playwright + Jinja2.

Usage::

    from chartrender.charts import render_chart

    image = await render_chart("bar", {"datasets": [{"data": [1, 2, 3]}]})
    image.save(Path("bar.png"))
"""

from __future__ import annotations

import asyncio
import threading
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any

from loguru import logger
from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from chartrender.charts.errors import RenderSurfaceFailure, RenderTimeout
from chartrender.charts.normalize import normalize_chart
from chartrender.charts.page import CANVAS_ID, READY_CLASS, build_page
from chartrender.charts.types import ChartRequest, RenderedImage
from chartrender.settings import ChartRenderSettings, get_settings


class ChartRenderer:
    """Singleton-ish headless renderer.

    * Lazy-inits a Playwright Chromium browser on first ``render()`` call.
    * Reuses the browser across calls; creates a fresh *context* per render
      for isolation, at most ``max_pages`` at a time.
    * Loads the chart page, waits for the ``.ready`` sentinel, then
      screenshots the canvas with a transparent background.
    """

    def __init__(self, settings: ChartRenderSettings | None = None) -> None:
        self._settings = settings or get_settings()
        self._pw: Playwright | None = None
        self._browser: Browser | None = None
        self._launch_lock = asyncio.Lock()
        self._pages = asyncio.Semaphore(self._settings.max_pages)

    # ── Lifecycle ────────────────────────────────────────

    async def _ensure_browser(self) -> Browser:
        """Launch Chromium on first call, reuse afterwards."""
        async with self._launch_lock:
            if self._browser is not None and self._browser.is_connected():
                return self._browser

            try:
                if self._pw is None:
                    self._pw = await async_playwright().start()
                self._browser = await self._pw.chromium.launch(
                    headless=True,
                    args=list(self._settings.browser_args),
                )
            except PlaywrightError as exc:
                raise RenderSurfaceFailure(f"could not launch Chromium: {exc}") from exc
            logger.info("ChartRenderer: Chromium browser launched")
            return self._browser

    async def close(self) -> None:
        """Shut down browser gracefully."""
        if self._browser is not None:
            await _release("browser", self._browser.close)
            self._browser = None
        if self._pw is not None:
            await _release("playwright", self._pw.stop)
            self._pw = None
        logger.info("ChartRenderer: closed")

    @asynccontextmanager
    async def _page(self, request: ChartRequest) -> AsyncIterator[Page]:
        """Acquire an isolated page sized for *request*; always closed on exit."""
        async with self._pages:
            browser = await self._ensure_browser()
            context = await browser.new_context(
                viewport={"width": request.width, "height": request.height},
                device_scale_factor=request.device_scale_factor,
            )
            try:
                page = await context.new_page()
                _forward_page_logs(page)
                yield page
            finally:
                await _release("page", context.close)

    # ── Rendering ────────────────────────────────────────

    async def render(self, request: ChartRequest, *, timeout_ms: int | None = None) -> RenderedImage:
        """Render *request* and return the PNG.

        Parameters
        ----------
        request:
            The chart to draw.
        timeout_ms:
            Max time (ms) to wait for the page to load and for the chart to
            signal readiness. Defaults to ``render_timeout_ms`` from settings.

        Raises
        ------
        InvalidConfiguration
            Before any browser work, when the request cannot be normalized.
        RenderTimeout
            The page did not load and signal readiness within ``timeout_ms``.
        RenderSurfaceFailure
            The browser failed to launch, load the page or capture the canvas.
        """
        config = normalize_chart(request)
        html = build_page(request, config, self._settings)
        timeout = timeout_ms if timeout_ms is not None else self._settings.render_timeout_ms

        started = time.monotonic()
        try:
            async with self._page(request) as page:
                # one budget shared by page load and readiness
                deadline = time.monotonic() + timeout / 1000
                await _load_page(page, html, _remaining_ms(deadline, timeout), timeout)
                await _wait_until_ready(page, _remaining_ms(deadline, timeout), timeout)
                body = await _capture_canvas(page)
        except PlaywrightError as exc:
            raise RenderSurfaceFailure(f"browser failed while rendering {config.type} chart: {exc}") from exc

        elapsed_ms = (time.monotonic() - started) * 1000
        logger.info(
            f"ChartRenderer: rendered {config.type} chart "
            f"({request.width}x{request.height} @{request.device_scale_factor}x, "
            f"{len(body)} bytes, {elapsed_ms:.0f}ms)"
        )
        return RenderedImage(
            body=body,
            width=request.width,
            height=request.height,
            scale=request.device_scale_factor,
        )


def _remaining_ms(deadline: float, timeout_ms: int) -> float:
    """Milliseconds left before *deadline*; Playwright reads 0 as "no timeout"."""
    remaining = (deadline - time.monotonic()) * 1000
    if remaining <= 0:
        raise RenderTimeout(f"chart did not signal readiness within {timeout_ms}ms")
    return remaining


async def _load_page(page: Page, html: str, remaining_ms: float, timeout_ms: int) -> None:
    try:
        await page.set_content(html, timeout=remaining_ms)
    except PlaywrightTimeoutError as exc:
        raise RenderTimeout(f"chart page did not load within {timeout_ms}ms") from exc


async def _wait_until_ready(page: Page, remaining_ms: float, timeout_ms: int) -> None:
    try:
        await page.wait_for_selector(f".{READY_CLASS}", state="attached", timeout=remaining_ms)
    except PlaywrightTimeoutError as exc:
        raise RenderTimeout(f"chart did not signal readiness within {timeout_ms}ms") from exc


async def _capture_canvas(page: Page) -> bytes:
    handle = await page.query_selector(f"#{CANVAS_ID}")
    if handle is None:
        raise RenderSurfaceFailure(f"canvas #{CANVAS_ID} not found in rendered page")
    try:
        return await handle.screenshot(omit_background=True, type="png")
    finally:
        await _release("canvas handle", handle.dispose)


async def _release(what: str, closer: Callable[[], Awaitable[Any]]) -> None:
    """Run a cleanup step; a failure is logged so the remaining steps still run."""
    try:
        await closer()
    except Exception as exc:
        logger.warning(f"ChartRenderer: failed to release {what}: {exc}")


def _forward_page_logs(page: Page) -> None:
    page.on("pageerror", lambda exc: logger.warning(f"ChartRenderer JS error: {exc}"))
    page.on(
        "console",
        lambda msg: logger.debug(f"ChartRenderer console [{msg.type}]: {msg.text}"),
    )


# ── Module-level singleton ──────────────────────────────

_renderer: ChartRenderer | None = None
# FastAPI resolves sync dependencies such as get_renderer() in its threadpool.
_renderer_lock = threading.Lock()


def get_renderer() -> ChartRenderer:
    """Return the module-level singleton, creating it lazily."""
    global _renderer
    if _renderer is None:
        with _renderer_lock:
            if _renderer is None:
                _renderer = ChartRenderer()
    return _renderer


async def shutdown_renderer() -> None:
    """Close the singleton's browser, if one was ever created."""
    global _renderer
    if _renderer is not None:
        await _renderer.close()
        _renderer = None


async def render_chart(
    type: str,
    data: dict[str, Any],
    options: dict[str, Any] | None = None,
    *,
    timeout_ms: int | None = None,
    **params: Any,
) -> RenderedImage:
    """Module-level convenience wrapper around :pyclass:`ChartRenderer.render`.

    *params* are any other :class:`ChartRequest` fields (``width``,
    ``font_family``, ``style``, ...). This is the primary public API.
    """
    request = ChartRequest.model_validate({"type": type, "data": data, "options": options, **params})
    return await get_renderer().render(request, timeout_ms=timeout_ms)
