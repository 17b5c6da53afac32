"""
Per-run occupancy bookkeeping.

An occupancy table maps every (day, period) slot of the week to the
resources (teachers or classrooms) held at that slot and the section holding
them. One table per resource kind lives for the duration of a single
generation run and is shared by all sections of that run; it is what keeps a
teacher or classroom from being double-booked across sections.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterator, Optional

from ..data.models import NUM_DAYS, PERIODS_PER_DAY, day_name
from ..errors import DoubleBookingError


class OccupancyTable:
    """Resource-by-slot occupancy for one resource kind."""

    def __init__(self, kind: str, num_days: int = NUM_DAYS, periods_per_day: int = PERIODS_PER_DAY):
        self.kind = kind
        self.num_days = num_days
        self.periods_per_day = periods_per_day
        self._slots: dict[tuple[int, int], dict[str, str]] = {
            (day, period): {}
            for day in range(num_days)
            for period in range(periods_per_day)
        }

    def owner(self, resource_id: str, day: int, period: int) -> Optional[str]:
        """Section holding the resource at a slot, if any."""
        return self._slots[(day, period)].get(resource_id)

    def is_free(self, resource_id: str, day: int, period: int, span: int = 1) -> bool:
        """Whether the resource is unclaimed for `span` periods starting at `period`."""
        if period + span > self.periods_per_day:
            return False
        return all(
            resource_id not in self._slots[(day, p)]
            for p in range(period, period + span)
        )

    def claim(self, resource_id: str, day: int, period: int, section_id: str) -> None:
        """
        Record that a section holds the resource at a slot.

        Raises:
            DoubleBookingError: If the resource is already held at that slot
        """
        holders = self._slots[(day, period)]
        if resource_id in holders:
            raise DoubleBookingError(
                f"{self.kind} {resource_id} already held by section {holders[resource_id]} "
                f"on {day_name(day)} period {period}"
            )
        holders[resource_id] = section_id

    def claimed_slots(self, resource_id: str) -> list[tuple[int, int]]:
        """All (day, period) slots at which the resource is held, in grid order."""
        return [slot for slot, holders in self._slots.items() if resource_id in holders]

    def iter_claims(self) -> Iterator[tuple[int, int, str, str]]:
        """Yield (day, period, resource_id, section_id) for every claim."""
        for (day, period), holders in self._slots.items():
            for resource_id, section_id in holders.items():
                yield day, period, resource_id, section_id

    def __len__(self) -> int:
        return sum(len(holders) for holders in self._slots.values())


@dataclass
class AllocationState:
    """
    All mutable bookkeeping of one generation run.

    Created empty at the start of a run and discarded when it ends; nothing
    carries over to the next run.
    """
    teachers: OccupancyTable = field(default_factory=lambda: OccupancyTable("Teacher"))
    classrooms: OccupancyTable = field(default_factory=lambda: OccupancyTable("Classroom"))
    workload: dict[str, int] = field(default_factory=lambda: defaultdict(int))

    def reset_workload(self) -> None:
        """Zero every teacher's workload counter."""
        self.workload.clear()

    def teacher_workload(self, teacher_id: str) -> int:
        return self.workload.get(teacher_id, 0)
