"""Exceptions raised by the shift comparison pipeline."""


class ShiftComparisonError(Exception):
    """Base class for every failure surfaced by a comparison."""


class HistoryFetchError(ShiftComparisonError):
    """Raised when a production history query fails or returns an unusable payload."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class TimestampParseError(ShiftComparisonError, ValueError):
    def __init__(self, timestamp: str) -> None:
        self.timestamp = timestamp
        super().__init__(f"Cannot parse history timestamp '{timestamp}'")
