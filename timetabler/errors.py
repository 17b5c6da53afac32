"""Exception hierarchy for the timetabler."""

from __future__ import annotations

from typing import Optional


class TimetablerError(Exception):
    """Base class for all timetabler errors."""
    pass


class SnapshotValidationError(TimetablerError):
    """Raised when a snapshot file cannot be parsed or fails validation."""
    pass


class InsufficientDataError(TimetablerError):
    """
    Raised when a generation run is missing required entities.

    Raised before any allocation or store mutation, so retrying after the
    missing entities are supplied is safe.
    """

    def __init__(self, counts: dict[str, int]):
        self.counts = dict(counts)
        missing = ", ".join(name for name, count in self.counts.items() if count == 0)
        details = ", ".join(f"{name}={count}" for name, count in self.counts.items())
        super().__init__(
            f"Cannot generate timetables, missing required data: {missing} ({details})"
        )


class NotFoundError(TimetablerError):
    """Raised when a requested schedule does not exist."""

    def __init__(self, message: str, section_id: Optional[str] = None):
        self.section_id = section_id
        super().__init__(message)


class PersistenceError(TimetablerError):
    """Raised when the schedule store fails to read or write."""
    pass


class GenerationInProgressError(TimetablerError):
    """Raised when a generation run is requested while another is running."""
    pass


class SlotOccupiedError(TimetablerError):
    """Raised when writing into a section slot that already holds a course."""
    pass


class DoubleBookingError(TimetablerError):
    """Raised when claiming a teacher or classroom already held at a slot."""
    pass
