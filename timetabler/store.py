"""
Schedule stores.

A store persists the WeeklySchedule records of the latest generation run.
Writes replace everything at once: previously stored schedules are discarded
and the new set becomes visible atomically, so a failed write leaves the
previous run's schedules in place.
"""

from __future__ import annotations

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field, ValidationError

from .data.models import WeeklySchedule
from .errors import NotFoundError, PersistenceError

logger = logging.getLogger(__name__)


class ScheduleStore(ABC):
    """Interface every schedule store implements."""

    @abstractmethod
    def replace_all(self, schedules: list[WeeklySchedule]) -> list[str]:
        """
        Discard all stored schedules and store the given ones.

        Returns:
            Section IDs under which the schedules can be retrieved

        Raises:
            PersistenceError: If the schedules could not be stored
        """

    @abstractmethod
    def list_schedules(self) -> list[WeeklySchedule]:
        """All stored schedules, in the order they were written."""

    def get(self, section_id: str) -> WeeklySchedule:
        """
        Get the schedule owned by a section.

        Raises:
            NotFoundError: If the section has no stored schedule
        """
        for schedule in self.list_schedules():
            if schedule.section_id == section_id:
                return schedule
        raise NotFoundError(f"Timetable not found for section '{section_id}'", section_id=section_id)


class InMemoryScheduleStore(ScheduleStore):
    """Store that keeps schedules in process memory."""

    def __init__(self):
        self._schedules: list[WeeklySchedule] = []

    def replace_all(self, schedules: list[WeeklySchedule]) -> list[str]:
        self._schedules = [s.model_copy(deep=True) for s in schedules]
        return [s.section_id for s in self._schedules]

    def list_schedules(self) -> list[WeeklySchedule]:
        return [s.model_copy(deep=True) for s in self._schedules]


class StoredSchedules(BaseModel):
    """On-disk layout of the JSON store."""
    generated_at: Optional[datetime] = Field(default=None, alias="generatedAt")
    schedules: list[WeeklySchedule] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class JsonScheduleStore(ScheduleStore):
    """
    Store that keeps schedules in a single JSON file.

    The file is rewritten through a temporary file in the same directory
    followed by an atomic rename.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def replace_all(self, schedules: list[WeeklySchedule]) -> list[str]:
        document = StoredSchedules(
            generatedAt=datetime.now(timezone.utc),
            schedules=schedules,
        )
        payload = document.model_dump_json(by_alias=True, indent=2)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise PersistenceError(f"Could not write schedules to {self.path}: {e}") from e

        logger.info("Stored %d schedules in %s", len(schedules), self.path)
        return [s.section_id for s in schedules]

    def list_schedules(self) -> list[WeeklySchedule]:
        return self.load().schedules

    def load(self) -> StoredSchedules:
        """
        Read the whole store document. A missing file is an empty store.

        Raises:
            PersistenceError: If the file cannot be read or is corrupt
        """
        if not self.path.exists():
            return StoredSchedules()

        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Could not read schedules from {self.path}: {e}") from e
        except UnicodeDecodeError as e:
            raise PersistenceError(f"Corrupt schedule store {self.path}: {e}") from e

        try:
            return StoredSchedules.model_validate_json(text)
        except ValidationError as e:
            raise PersistenceError(f"Corrupt schedule store {self.path}: {e}") from e
