from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

log = logging.getLogger(__name__)


@contextmanager
def timed(section: str, timings: Optional[Dict[str, float]] = None) -> Iterator[None]:
    """
    Adds the wall time of the block to timings[section] and logs it at debug.
    A stage entered twice for the same file sums up; a block that raises is
    still recorded.
    """
    t0 = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - t0
        log.debug("Stage %s took %.4fs", section, elapsed)
        if timings is not None:
            timings[section] = timings.get(section, 0.0) + elapsed
