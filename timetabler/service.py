"""
Timetable service: the Generate / List / Get operations.

Wires a snapshot loader, the allocation engine and a schedule store
together. Generation runs are serialized: a second `generate()` while one
is in flight is rejected rather than queued.
"""

from __future__ import annotations

import logging
import threading

from .config import EngineConfig
from .data.loader import SnapshotLoader
from .engine.allocator import AllocationEngine
from .errors import GenerationInProgressError
from .output.resolver import ScheduleResolver, create_generation_output
from .output.schema import GenerationOutput, ResolvedSchedule
from .store import ScheduleStore

logger = logging.getLogger(__name__)


class TimetableService:
    """
    Facade over loader, engine and store.

    Usage:
        service = TimetableService(JsonSnapshotLoader("school.json"), JsonScheduleStore("out.json"))
        output = service.generate()
        schedule = service.get_schedule("sec-a")
    """

    def __init__(
        self,
        loader: SnapshotLoader,
        store: ScheduleStore,
        config: EngineConfig | None = None,
    ):
        self.loader = loader
        self.store = store
        self.config = config or EngineConfig()
        self._run_lock = threading.Lock()

    def generate(self) -> GenerationOutput:
        """
        Generate schedules for every section and replace the stored ones.

        All schedules are computed in memory first and handed to the store in
        one write, so either every schedule of the run is stored or none is.

        Raises:
            InsufficientDataError: If any entity collection is empty
            PersistenceError: If the store write fails
            GenerationInProgressError: If another run is in progress
        """
        if not self._run_lock.acquire(blocking=False):
            raise GenerationInProgressError("A timetable generation run is already in progress")

        try:
            snapshot = self.loader()
            result = AllocationEngine(snapshot, self.config).run()
            self.store.replace_all(result.schedules)
            return create_generation_output(result, snapshot)
        finally:
            self._run_lock.release()

    @property
    def is_generating(self) -> bool:
        return self._run_lock.locked()

    def list_schedules(self) -> list[ResolvedSchedule]:
        """All stored schedules, resolved against the current snapshot."""
        schedules = self.store.list_schedules()
        logger.debug("Fetched %d schedules", len(schedules))
        return ScheduleResolver(self.loader()).resolve_all(schedules)

    def get_schedule(self, section_id: str) -> ResolvedSchedule:
        """
        The stored schedule of one section, resolved.

        Raises:
            NotFoundError: If the section has no schedule
        """
        schedule = self.store.get(section_id)
        return ScheduleResolver(self.loader()).resolve(schedule)
