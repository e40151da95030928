"""Domain exceptions for pearl_tracker."""

from __future__ import annotations


class PearlTrackerError(Exception):
    """Base class for errors raised by pearl_tracker."""


class InvalidRequestError(PearlTrackerError, ValueError):
    """Raised when an inbound detection request is malformed (e.g. blank URL)."""


class UnknownSourceError(PearlTrackerError):
    """Raised when a source identifier is not in the catalog."""

    def __init__(self, source_id: str, message: str | None = None) -> None:
        self.source_id = source_id
        if message is None:
            message = f"Unknown source: {source_id}"
        super().__init__(message)


class MissingYearError(PearlTrackerError):
    """Raised when a partitioned source is queried without a sub-option."""

    def __init__(self, source_id: str, message: str | None = None) -> None:
        self.source_id = source_id
        if message is None:
            message = f"Year is required for {source_id} detection"
        super().__init__(message)


class MissingCredentialError(PearlTrackerError):
    """Raised when a source needs a credential that was not configured."""

    def __init__(self, source_id: str, setting: str) -> None:
        self.source_id = source_id
        self.setting = setting
        super().__init__(f"{source_id} requires a credential via {setting}")
