"""Load and validate snapshots from JSON files."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Callable, Union

from pydantic import ValidationError

from ..errors import SnapshotValidationError
from .models import Snapshot


# A snapshot loader is any zero-argument callable returning the current entities.
SnapshotLoader = Callable[[], Snapshot]


def load_snapshot(path: Union[str, Path]) -> Snapshot:
    """
    Load a snapshot from a JSON file.

    The file holds the four entity collections under the keys ``teachers``,
    ``courses``, ``classrooms`` and ``sections``. Keys may be camelCase
    (``maxWorkload``, ``studentCount``) or snake_case.

    Args:
        path: Path to the JSON file

    Returns:
        Validated Snapshot

    Raises:
        FileNotFoundError: If the file doesn't exist
        SnapshotValidationError: If the file isn't valid JSON or fails validation
    """
    path = Path(path)

    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise SnapshotValidationError(f"{path}: invalid JSON: {e}") from e
        except UnicodeDecodeError as e:
            raise SnapshotValidationError(f"{path}: not UTF-8 text: {e}") from e

    return parse_snapshot(data)


def parse_snapshot(data: Any) -> Snapshot:
    """
    Validate raw snapshot data.

    Raises:
        SnapshotValidationError: If the data fails validation
    """
    if not isinstance(data, dict):
        raise SnapshotValidationError("Snapshot must be a JSON object")

    converted = _convert_keys_to_snake_case(data)
    # Accept Mongo-style '_id' keys as 'id'
    converted = _normalize_ids(converted)

    try:
        return Snapshot.model_validate(converted)
    except ValidationError as e:
        raise SnapshotValidationError(str(e)) from e


def snapshot_to_dict(snapshot: Snapshot) -> dict:
    """Convert a Snapshot to a camelCase dictionary for JSON serialization."""
    return {
        "teachers": [
            {
                "id": t.id,
                "name": t.name,
                "maxWorkload": t.max_workload,
                "availability": t.availability.model_dump(),
            }
            for t in snapshot.teachers
        ],
        "courses": [
            {
                "id": c.id,
                "code": c.code,
                "name": c.name,
                "minPeriods": c.min_periods,
                "maxPeriods": c.max_periods,
                "isLab": c.is_lab,
                "teachers": list(c.teachers),
            }
            for c in snapshot.courses
        ],
        "classrooms": [
            {
                "id": r.id,
                "roomNumber": r.room_number,
                "capacity": r.capacity,
            }
            for r in snapshot.classrooms
        ],
        "sections": [
            {
                "id": s.id,
                "name": s.name,
                "studentCount": s.student_count,
            }
            for s in snapshot.sections
        ],
    }


class JsonSnapshotLoader:
    """Snapshot loader that re-reads a JSON file on every call."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def __call__(self) -> Snapshot:
        return load_snapshot(self.path)


def _convert_keys_to_snake_case(obj: Any) -> Any:
    """Recursively convert dictionary keys from camelCase to snake_case."""

    def to_snake_case(name: str) -> str:
        name = re.sub(r'([A-Z]+)([A-Z][a-z])', r'\1_\2', name)
        name = re.sub(r'([a-z\d])([A-Z])', r'\1_\2', name)
        return name.lower()

    if isinstance(obj, dict):
        return {to_snake_case(k): _convert_keys_to_snake_case(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_convert_keys_to_snake_case(item) for item in obj]
    else:
        return obj


def _normalize_ids(data: dict) -> dict:
    """Rename '_id' to 'id' on the top-level entity records."""
    result = dict(data)
    for key in ("teachers", "courses", "classrooms", "sections"):
        items = result.get(key)
        if not isinstance(items, list):
            continue
        normalized = []
        for item in items:
            if isinstance(item, dict) and "_id" in item and "id" not in item:
                item = {("id" if k == "_id" else k): v for k, v in item.items()}
            normalized.append(item)
        result[key] = normalized
    return result
