from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List

from camtrap_tally.data_processing.delimited import iter_rows, parse_camera_id, parse_date
from camtrap_tally.data_processing.errors import StructuralParseError
from camtrap_tally.data_processing.schemas import ONGOING_END, ActivityPeriod, YearMonth

log = logging.getLogger(__name__)

# Hungarian sheet: header reads "...kihelyezés" (deployment), "folyamatban" = still running
HEADER_SUBSTRING = "kihely"
IN_PROGRESS = "folyamatban"


def _is_header_row(row: List[str]) -> bool:
    return HEADER_SUBSTRING in row[0] or HEADER_SUBSTRING in row[1]


def _end_bound(raw: str, number: int, source: str) -> YearMonth:
    text = raw.strip()
    if text.lower() == IN_PROGRESS:
        return ONGOING_END
    d = parse_date(text, number, source)
    return YearMonth(d.year, d.month)


@dataclass
class ActivityPeriodParser:
    """
    Camera deployment sheet, one camera per row:
      from;to          camera id = running row number (1-based)
      id;from;to       explicit camera id
    Dates are yyyy.MM.dd; the end may read "folyamatban".
    """

    def parse(self, text: str, source: str = "<text>") -> Dict[int, ActivityPeriod]:
        periods: Dict[int, ActivityPeriod] = {}
        sequence = 0
        for number, row in iter_rows(text):
            if len(row) not in (2, 3):
                log.error("Camera activity file %s line %d isn't of length 2 or 3!", source, number)
                raise StructuralParseError(source, number, "isn't of length 2 or 3!")
            if _is_header_row(row):
                log.info("Skipping header")
                continue

            sequence += 1
            has_id = len(row) == 3
            camera_id = parse_camera_id(row[0], number, source) if has_id else sequence
            start = parse_date(row[1 if has_id else 0], number, source)
            end = _end_bound(row[2 if has_id else 1], number, source)

            if camera_id in periods:
                log.warning("Camera %d listed twice in %s, keeping line %d", camera_id, source, number)
            periods[camera_id] = ActivityPeriod(camera_id, YearMonth(start.year, start.month), end)

        log.info("Loaded activity periods for %d cameras from %s", len(periods), source)
        return periods
