from __future__ import annotations

from typing import Optional


class TallyError(Exception):
    """Base class for every fatal condition raised while processing one file."""


class StructuralParseError(TallyError, ValueError):
    def __init__(self, source: str, row: int, message: str):
        self.source = source
        self.row = row
        super().__init__(f"File {source} line {row} {message}")


class FieldValidationError(TallyError, ValueError):
    def __init__(self, field: str, row: int, source: Optional[str] = None):
        self.field = field
        self.row = row
        self.source = source
        where = f" in {source}" if source else ""
        super().__init__(f"No {field} on line: {row}{where}")


class FieldFormatError(TallyError, ValueError):
    def __init__(self, field: str, value: str, row: Optional[int] = None, source: Optional[str] = None):
        self.field = field
        self.value = value
        self.row = row
        self.source = source
        where = ""
        if row is not None:
            where = f" on line {row}"
        if source:
            where += f" in {source}"
        super().__init__(f"Cannot parse {field} {value!r}{where}")


class MissingActivityPeriodError(TallyError, LookupError):
    def __init__(self, camera_id: int):
        self.camera_id = camera_id
        super().__init__(f"No activity period for camera {camera_id}")


class SourceIOError(TallyError, OSError):
    def __init__(self, source: str, cause: BaseException):
        self.source = source
        super().__init__(f"Couldn't access file: {source} ({cause})")
