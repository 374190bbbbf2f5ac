"""Failures raised while turning a chart request into a PNG."""

from __future__ import annotations


class ChartRenderError(RuntimeError):
    """Base class for every chart rendering failure."""


class InvalidConfiguration(ChartRenderError, ValueError):
    """The request is malformed in a way normalization cannot default around."""


class RenderTimeout(ChartRenderError):
    """The page never signalled readiness within the allowed time."""


class RenderSurfaceFailure(ChartRenderError):
    """The headless browser or page failed (launch, load, missing canvas, capture)."""
