"""chartrender - chart.js charts rendered to PNG by a headless browser."""

__version__ = "0.1.0"
__logo__ = "📊"
