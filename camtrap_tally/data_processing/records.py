from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from camtrap_tally.data_processing.delimited import UTF8_BOM, iter_rows, parse_camera_id, parse_timestamp
from camtrap_tally.data_processing.errors import FieldValidationError, StructuralParseError
from camtrap_tally.data_processing.schemas import EventRecord

log = logging.getLogger(__name__)

HEADER_MARKER = "Site_ID"
N_FIELDS = 3
FIELD_NAMES = ("camera number", "date and time", "species")


def _is_header_row(row: List[str]) -> bool:
    return row[0].lstrip(UTF8_BOM).strip().lower() == HEADER_MARKER.lower()


@dataclass
class RecordParser:
    """
    Parses detection logs exported from the camera-trap spreadsheet:
      cameraId;yyyy.MM.d H:mm;species

    skip_header=False makes every row, the first included, parse as data.
    """

    skip_header: bool = True

    def parse(self, text: str, source: str = "<text>") -> List[EventRecord]:
        records: List[EventRecord] = []
        for number, row in iter_rows(text):
            if len(row) != N_FIELDS:
                log.error("File %s line %d isn't of length %d!", source, number, N_FIELDS)
                raise StructuralParseError(source, number, f"isn't of length {N_FIELDS}!")
            if self.skip_header and _is_header_row(row):
                log.info("Skipping header.")
                continue
            records.append(self._to_record(row, number, source))

        log.info("Parsed %d detection records from %s", len(records), source)
        return records

    @staticmethod
    def _to_record(row: List[str], number: int, source: str) -> EventRecord:
        for name, value in zip(FIELD_NAMES, row):
            if not value.strip():
                log.error("File %s line %d: missing %s", source, number, name)
                raise FieldValidationError(name, number, source)

        return EventRecord(
            camera_id=parse_camera_id(row[0], number, source),
            timestamp=parse_timestamp(row[1], number, source),
            species=row[2],
        )
