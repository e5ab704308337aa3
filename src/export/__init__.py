"""
Report exporters (PDF, XLSX) and the history trend chart.
"""

from .report import ReportData, build_report_lines
from .pdf import export_pdf
from .spreadsheet import export_xlsx
from .chart import chart_series, render_trend_png

__all__ = [
    "ReportData",
    "build_report_lines",
    "export_pdf",
    "export_xlsx",
    "chart_series",
    "render_trend_png",
]
