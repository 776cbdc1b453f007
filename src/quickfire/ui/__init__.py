"""UI package exports."""

from quickfire.ui.render import ReportRenderer

__all__ = ["ReportRenderer"]
