"""
PDF report export (matplotlib PDF backend).
"""

from __future__ import annotations

import io
import logging

from matplotlib.figure import Figure

from .report import REPORT_TITLE, ReportData, build_report_lines

A4_MM = (210.0, 297.0)
MM_PER_INCH = 25.4

# Page layout in millimetres from the top-left corner.
LEFT_MM = 10.0
ENTRY_LEFT_MM = 15.0
FIRST_LINE_MM = 10.0
LINE_STEP_MM = 10.0
ENTRIES_TOP_MM = 50.0
HEADER_LINES = 4


def export_pdf(data: ReportData) -> bytes:
    """Render the text report as a single A4 page and return the PDF bytes."""
    width_mm, height_mm = A4_MM
    fig = Figure(figsize=(width_mm / MM_PER_INCH, height_mm / MM_PER_INCH))

    lines = build_report_lines(data)
    for i, line in enumerate(lines):
        if i < HEADER_LINES:
            x_mm, y_mm = LEFT_MM, FIRST_LINE_MM + i * LINE_STEP_MM
        else:
            x_mm, y_mm = ENTRY_LEFT_MM, ENTRIES_TOP_MM + (i - HEADER_LINES) * LINE_STEP_MM
        fig.text(
            x_mm / width_mm,
            1.0 - y_mm / height_mm,
            line,
            fontsize=12,
            verticalalignment="baseline",
        )

    buf = io.BytesIO()
    fig.savefig(buf, format="pdf", metadata={"Title": REPORT_TITLE})
    logging.info(f"PDF report exported ({len(data.history)} history entries)")
    return buf.getvalue()
