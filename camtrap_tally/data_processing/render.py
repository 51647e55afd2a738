from __future__ import annotations

from typing import List, Optional, Sequence

import pandas as pd

from camtrap_tally.data_processing.delimited import DELIMITER, LINE_TERMINATOR, format_timestamp
from camtrap_tally.data_processing.schemas import CellValue, CountMatrix, EventRecord

MATRIX_KEY_COLUMNS = ["cameraNumber", "year", "month"]
NOT_ACTIVE = "N/A"
MISSING = "ERROR"


def _to_text(df: pd.DataFrame, header: bool) -> str:
    return df.to_csv(sep=DELIMITER, index=False, header=header, lineterminator=LINE_TERMINATOR)


def render_cell(value: Optional[CellValue]) -> str:
    if value is None:
        return MISSING
    if value.is_inactive:
        return NOT_ACTIVE
    return str(value.count)


def render_flat(records: Sequence[EventRecord], include_camera_id: bool = True) -> str:
    """One row per record, input order: camera, timestamp, keep flag (blank if not kept)."""
    rows = []
    for rec in records:
        row = {"camera": rec.camera_id} if include_camera_id else {}
        row["timestamp"] = format_timestamp(rec.timestamp)
        row["result"] = rec.keep_flag or ""
        rows.append(row)

    columns = ["camera", "timestamp", "result"] if include_camera_id else ["timestamp", "result"]
    return _to_text(pd.DataFrame(rows, columns=columns), header=False)


def matrix_frame(matrix: CountMatrix) -> pd.DataFrame:
    columns = MATRIX_KEY_COLUMNS + list(matrix.species)
    rows: List[List[object]] = []
    for (camera, ym), counts in matrix.ordered_cells():
        rows.append([camera, ym.year, ym.month] + [render_cell(counts.get(name)) for name in matrix.species])
    return pd.DataFrame(rows, columns=columns, dtype=object)


def render_matrix(matrix: CountMatrix) -> str:
    return _to_text(matrix_frame(matrix), header=True)
