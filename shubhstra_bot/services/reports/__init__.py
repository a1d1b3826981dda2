"""
Report generation.
"""

from .generator import ReportGenerator, TextReportGenerator

__all__ = ["ReportGenerator", "TextReportGenerator"]
