from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence

import pandas as pd

from camtrap_tally.data_processing.errors import MissingActivityPeriodError
from camtrap_tally.data_processing.schemas import (
    INACTIVE,
    ActivityPeriod,
    CellKey,
    CellValue,
    CountMatrix,
    EventRecord,
    YearMonth,
)

log = logging.getLogger(__name__)

FRAME_COLUMNS = ["camera_id", "year", "month", "species"]


def unselected_records(records: Sequence[EventRecord]) -> List[EventRecord]:
    """Drops the records the deduplicator flagged; the rest are what the matrix counts."""
    return [r for r in records if not r.is_selected]


def records_frame(records: Sequence[EventRecord]) -> pd.DataFrame:
    rows = [
        {
            "camera_id": r.camera_id,
            "year": r.timestamp.year,
            "month": r.timestamp.month,
            "species": r.species_key,
        }
        for r in records
    ]
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)


@dataclass
class MatrixAggregator:
    activity_periods: Mapping[int, ActivityPeriod]

    def _period_for(self, camera_id: int) -> ActivityPeriod:
        try:
            return self.activity_periods[camera_id]
        except KeyError:
            log.error("Camera %d has detections but no activity period", camera_id)
            raise MissingActivityPeriodError(camera_id) from None

    def build(self, records: Sequence[EventRecord]) -> CountMatrix:
        """
        Builds the camera x year-month x species grid from deduplicated records.

        Records the deduplicator selected are dropped first; only the remaining
        (suppressed) detections are counted.
        """
        remaining = unselected_records(records)
        log.info("Matrix input: %d of %d records left after removing selected ones", len(remaining), len(records))
        df = records_frame(remaining)

        cameras = sorted(int(c) for c in df["camera_id"].unique())
        years = sorted(int(y) for y in df["year"].unique())
        species = sorted(str(s) for s in df["species"].unique())

        cells = self._seed(cameras, years, species)
        self._count(df, cells)

        log.info(
            "Matrix built: cameras=%d years=%d species=%d cells=%d",
            len(cameras),
            len(years),
            len(species),
            len(cells),
        )
        return CountMatrix(species=species, cells=cells)

    def _seed(self, cameras: List[int], years: List[int], species: List[str]) -> Dict[CellKey, Dict[str, CellValue]]:
        cells: Dict[CellKey, Dict[str, CellValue]] = {}
        for camera in cameras:
            period = self._period_for(camera)
            for year in years:
                for month in range(1, 13):
                    ym = YearMonth(year, month)
                    seed = CellValue.active(0) if period.covers(ym) else INACTIVE
                    cells[(camera, ym)] = {name: seed for name in species}
        return cells

    def _count(self, df: pd.DataFrame, cells: Dict[CellKey, Dict[str, CellValue]]) -> None:
        if df.empty:
            return

        hits = df.groupby(FRAME_COLUMNS, sort=True).size()
        for (camera, year, month, name), n in hits.items():
            ym = YearMonth(int(year), int(month))
            cell = cells[(int(camera), ym)]
            current = cell[name]
            if current.is_inactive:
                # The first hit replaces the N/A seed with 1, later hits add on top
                log.warning(
                    "Species detection outside camera activity interval! camera: %d, year: %d, month: %d",
                    int(camera),
                    ym.year,
                    ym.month,
                )
                cell[name] = CellValue.active(int(n))
            else:
                cell[name] = CellValue.active(current.count + int(n))
