from __future__ import annotations

import logging
from typing import Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: Union[str, int] = "INFO") -> None:
    """Configure the root logger once; modules log through `logging.getLogger(__name__)`."""
    if isinstance(level, str):
        level = level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)
