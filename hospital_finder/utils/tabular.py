from __future__ import annotations

import io
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

CSV_CONTENT_TYPES = {"text/csv", "application/csv", "text/plain"}


class UnreadableTableError(Exception):
    """Raised when an uploaded payload is not a readable spreadsheet or CSV."""


def is_csv(filename: Optional[str], content_type: Optional[str] = None) -> bool:
    if filename and Path(filename).suffix.lower() == ".csv":
        return True
    return (content_type or "").split(";")[0].strip().lower() in CSV_CONTENT_TYPES


def read_table(
    content: bytes,
    filename: Optional[str] = None,
    content_type: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Parse a CSV or the first sheet of a workbook into one dict per row."""
    if not content:
        raise UnreadableTableError("Uploaded file is empty")

    try:
        if is_csv(filename, content_type):
            frame = pd.read_csv(
                io.BytesIO(content),
                dtype=str,
                keep_default_na=False,
                encoding="utf-8-sig",
            )
        else:
            frame = pd.read_excel(io.BytesIO(content), sheet_name=0)
    except Exception as exc:
        raise UnreadableTableError(f"Could not read tabular file: {exc}") from exc

    frame.columns = [str(column).strip() for column in frame.columns]
    # Empty spreadsheet cells come back as NaN; hand them to callers as None
    frame = frame.astype(object).where(pd.notna(frame), None)
    return frame.to_dict(orient="records")


def read_csv_file(path: str | Path) -> List[Dict[str, Any]]:
    path = Path(path)
    return read_table(path.read_bytes(), filename=path.name)
