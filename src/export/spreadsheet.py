"""
Spreadsheet export: one row per history entry.
"""

from __future__ import annotations

import io
import logging
from typing import List

import pandas as pd

from models.history import HistoryItem

COLUMNS = ["id", "timestamp", "count"]


def history_frame(history: List[HistoryItem]) -> pd.DataFrame:
    return pd.DataFrame([item.to_dict() for item in history], columns=COLUMNS)


def export_xlsx(history: List[HistoryItem], sheet_name: str = "Detection History") -> bytes:
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        history_frame(history).to_excel(writer, sheet_name=sheet_name, index=False)
    logging.info(f"Spreadsheet exported ({len(history)} rows)")
    return buf.getvalue()
