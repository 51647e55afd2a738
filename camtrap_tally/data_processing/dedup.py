from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from camtrap_tally.data_processing.schemas import EventRecord

log = logging.getLogger(__name__)

GroupKey = Tuple[int, str]


def group_by_camera_species(records: Sequence[EventRecord]) -> Dict[GroupKey, List[EventRecord]]:
    """Partition by (camera, upper-cased species); each list sorted by time, ties in input order."""
    groups: Dict[GroupKey, List[EventRecord]] = defaultdict(list)
    for rec in records:
        groups[(rec.camera_id, rec.species_key)].append(rec)
    for recs in groups.values():
        recs.sort(key=lambda r: r.timestamp)
    return dict(groups)


def minutes_between(earlier: datetime, later: datetime) -> int:
    # Whole minutes, truncated toward zero
    return int((later - earlier).total_seconds() / 60)


@dataclass
class IntervalDeduplicator:
    interval_minutes: int

    def __post_init__(self) -> None:
        if self.interval_minutes < 0:
            raise ValueError(f"Interval must be non-negative, got {self.interval_minutes}")

    def mark(self, records: Sequence[EventRecord]) -> int:
        """
        Greedy cool-down selection per (camera, species):
          - the earliest record is always kept
          - a later record is kept only when at least `interval_minutes`
            passed since the last kept one
        Kept records get keep_flag = their species as read. Returns the number kept.
        """
        groups = group_by_camera_species(records)
        kept = 0
        for recs in groups.values():
            kept += self._mark_sorted(recs)

        log.info(
            "Interval %d min: kept %d of %d detections across %d camera/species groups",
            self.interval_minutes,
            kept,
            len(records),
            len(groups),
        )
        return kept

    def _mark_sorted(self, recs: List[EventRecord]) -> int:
        last: Optional[datetime] = None
        kept = 0
        for rec in recs:
            if last is None or minutes_between(last, rec.timestamp) >= self.interval_minutes:
                rec.keep_flag = rec.species
                last = rec.timestamp
                kept += 1
        return kept
