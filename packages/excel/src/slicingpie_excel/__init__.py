"""Excel rendering for slicing pie reports."""

from .workbook_renderer import SlicingPieWorkbookRenderer

__all__ = ["SlicingPieWorkbookRenderer"]
