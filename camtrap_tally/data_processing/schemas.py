from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Iterator, List, NamedTuple, Tuple


class YearMonth(NamedTuple):
    year: int
    month: int

    @classmethod
    def of(cls, moment: datetime) -> "YearMonth":
        return cls(moment.year, moment.month)


# Far-future end bound for cameras that are still deployed
ONGOING_END = YearMonth(2077, 1)


@dataclass
class EventRecord:
    camera_id: int
    timestamp: datetime
    species: str
    keep_flag: str = ""

    @property
    def species_key(self) -> str:
        return self.species.upper()

    @property
    def is_selected(self) -> bool:
        return bool(self.keep_flag and self.keep_flag.strip())


@dataclass(frozen=True)
class ActivityPeriod:
    camera_id: int
    start: YearMonth
    end: YearMonth

    def covers(self, ym: YearMonth) -> bool:
        # Both bounds inclusive
        return self.start <= ym <= self.end


class CellState(Enum):
    INACTIVE = "inactive"
    ACTIVE = "active"


@dataclass(frozen=True)
class CellValue:
    state: CellState
    count: int = 0

    @classmethod
    def active(cls, count: int = 0) -> "CellValue":
        return cls(CellState.ACTIVE, count)

    @property
    def is_inactive(self) -> bool:
        return self.state is CellState.INACTIVE


INACTIVE = CellValue(CellState.INACTIVE)

CellKey = Tuple[int, YearMonth]


@dataclass
class CountMatrix:
    """Camera x year-month grid of per-species cell values.

    ``species`` holds the upper-cased column order used when rendering.
    """

    species: List[str]
    cells: Dict[CellKey, Dict[str, CellValue]]

    def ordered_cells(self) -> Iterator[Tuple[CellKey, Dict[str, CellValue]]]:
        for key in sorted(self.cells):
            yield key, self.cells[key]

    def __len__(self) -> int:
        return len(self.cells)
