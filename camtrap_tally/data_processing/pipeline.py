from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

from camtrap_tally.data_processing.activity import ActivityPeriodParser
from camtrap_tally.data_processing.dedup import IntervalDeduplicator
from camtrap_tally.data_processing.delimited import read_source
from camtrap_tally.data_processing.matrix import MatrixAggregator
from camtrap_tally.data_processing.records import RecordParser
from camtrap_tally.data_processing.render import render_flat, render_matrix
from camtrap_tally.data_processing.schemas import ActivityPeriod
from camtrap_tally.utils.timer import timed

log = logging.getLogger(__name__)


@dataclass
class TallyOptions:
    interval_minutes: int
    matrix_mode: bool = False
    include_camera_id: bool = True
    skip_header: bool = True


@dataclass
class TallyResult:
    source: str
    text: str
    n_records: int
    n_selected: int
    timings: Dict[str, float] = field(default_factory=dict)


def load_activity_periods(path: Union[str, Path]) -> Dict[int, ActivityPeriod]:
    path = Path(path)
    return ActivityPeriodParser().parse(read_source(path), source=path.name)


def process_text(
    text: str,
    options: TallyOptions,
    source: str = "<text>",
    activity_periods: Optional[Mapping[int, ActivityPeriod]] = None,
    timings: Optional[Dict[str, float]] = None,
) -> TallyResult:
    """
    Runs one detection log through parse -> dedup -> render.
    Matrix mode needs the camera activity periods.
    """
    if timings is None:
        timings = {}
    if options.matrix_mode and activity_periods is None:
        raise ValueError("Matrix mode needs camera activity periods.")

    deduplicator = IntervalDeduplicator(options.interval_minutes)

    with timed("parse", timings):
        records = RecordParser(skip_header=options.skip_header).parse(text, source=source)

    with timed("dedup", timings):
        n_selected = deduplicator.mark(records)

    if options.matrix_mode:
        with timed("aggregate", timings):
            matrix = MatrixAggregator(activity_periods).build(records)
        with timed("render", timings):
            out = render_matrix(matrix)
    else:
        with timed("render", timings):
            out = render_flat(records, include_camera_id=options.include_camera_id)

    log.debug("Timings for %s: %s", source, timings)
    return TallyResult(source=source, text=out, n_records=len(records), n_selected=n_selected, timings=timings)


def process_file(
    path: Union[str, Path],
    options: TallyOptions,
    activity_periods: Optional[Mapping[int, ActivityPeriod]] = None,
) -> TallyResult:
    path = Path(path)
    timings: Dict[str, float] = {}
    with timed("read", timings):
        text = read_source(path)
    result = process_text(text, options, source=path.name, activity_periods=activity_periods, timings=timings)
    log.info(
        "Processed %s: %d records, %d selected (%s mode)",
        path.name,
        result.n_records,
        result.n_selected,
        "matrix" if options.matrix_mode else "flat",
    )
    return result
