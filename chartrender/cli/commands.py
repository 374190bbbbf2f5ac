"""CLI commands for chartrender."""

import asyncio
import json
import sys
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from chartrender import __logo__, __version__

app = typer.Typer(
    name="chartrender",
    help=f"{__logo__} chartrender - chart.js charts rendered to PNG",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} chartrender v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """chartrender - chart.js charts rendered to PNG."""
    pass


def _load_request(spec: str):
    """Read a chart request from a JSON file, or stdin for ``-``."""
    from chartrender.charts import ChartRequest

    try:
        raw = sys.stdin.read() if spec == "-" else Path(spec).read_text(encoding="utf-8")
    except OSError as e:
        console.print(f"[red]Cannot read {escape(spec)}: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    try:
        return ChartRequest.model_validate(json.loads(raw))
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid JSON in {escape(spec)}: {escape(str(e))}[/red]")
        raise typer.Exit(1)
    except ValidationError as e:
        console.print(f"[red]Invalid chart request:[/red]\n{escape(str(e))}")
        raise typer.Exit(1)


def _default_output(spec: str) -> Path:
    from chartrender.settings import get_settings

    if spec == "-":
        return get_settings().output_dir / "chart.png"
    return Path(spec).with_suffix(".png")


# ============================================================================
# Render
# ============================================================================


@app.command()
def render(
    spec: str = typer.Argument(..., help="Chart request JSON file, or - for stdin"),
    output: Path = typer.Option(None, "--output", "-o", help="PNG path (default: next to SPEC)"),
    timeout: int = typer.Option(None, "--timeout", "-t", help="Readiness timeout in ms"),
    logs: bool = typer.Option(False, "--logs/--no-logs", help="Show chartrender runtime logs"),
):
    """Render a chart request to a PNG file."""
    from loguru import logger

    from chartrender.charts import ChartRenderError, ChartRenderer

    if logs:
        logger.enable("chartrender")
    else:
        logger.disable("chartrender")

    request = _load_request(spec)
    out_path = output or _default_output(spec)

    async def run():
        renderer = ChartRenderer()
        try:
            return await renderer.render(request, timeout_ms=timeout)
        finally:
            await renderer.close()

    try:
        image = asyncio.run(run())
    except ChartRenderError as e:
        console.print(f"[red]Render failed ({type(e).__name__}): {escape(str(e))}[/red]")
        raise typer.Exit(1)

    image.save(out_path)
    console.print(
        f"[green]✓[/green] Wrote {out_path} "
        f"({image.width}x{image.height} @{image.scale}x, {len(image.body)} bytes)"
    )


@app.command()
def html(
    spec: str = typer.Argument(..., help="Chart request JSON file, or - for stdin"),
):
    """Print the page a chart request renders from (no browser needed)."""
    from chartrender.charts import ChartRenderError, normalize_chart
    from chartrender.charts.page import build_page

    request = _load_request(spec)
    try:
        config = normalize_chart(request)
    except ChartRenderError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    typer.echo(build_page(request, config))


# ============================================================================
# Serve (FastAPI HTTP)
# ============================================================================


@app.command()
def serve(
    host: str = typer.Option(None, "--host", help="Bind host (default from settings)"),
    port: int = typer.Option(None, "--port", "-p", help="Bind port (default from settings)"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
):
    """Start the chartrender HTTP API server (FastAPI + Uvicorn)."""
    import uvicorn

    from chartrender.settings import get_settings

    settings = get_settings()
    host = host or settings.host
    port = port or settings.port

    console.print(f"{__logo__} Starting chartrender API on {host}:{port} ...")
    uvicorn.run(
        "chartrender.api.app:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


if __name__ == "__main__":
    app()
