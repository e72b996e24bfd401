"""Durable key-value store for import mappings, keyed by (event, schedule).

The linker only needs read/write; the store is injected wherever mappings are
consulted so nothing reaches for global state. JsonFileMappingStore keeps one
JSON file per key, written wholesale on every import.
"""

import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from src.planner.logging import get_logger
from src.planner.models import ImportedRowMapping

log = get_logger(__name__)

KEY_PREFIX = "planner"


def make_store_key(event_id: str, schedule_id: str) -> str:
    return f"{KEY_PREFIX}:event:{event_id}:schedule:{schedule_id}:import-map"


class MappingStore(Protocol):
    def read(self, event_id: str, schedule_id: str) -> list[ImportedRowMapping]: ...

    def write(
        self, event_id: str, schedule_id: str, rows: list[ImportedRowMapping]
    ) -> None: ...


class InMemoryMappingStore:
    """Dict-backed store (tests, embedding in a long-running process)."""

    def __init__(self) -> None:
        self._data: dict[str, list[ImportedRowMapping]] = {}

    def read(self, event_id: str, schedule_id: str) -> list[ImportedRowMapping]:
        return list(self._data.get(make_store_key(event_id, schedule_id), []))

    def write(
        self, event_id: str, schedule_id: str, rows: list[ImportedRowMapping]
    ) -> None:
        self._data[make_store_key(event_id, schedule_id)] = list(rows)


class JsonFileMappingStore:
    """One JSON file per (event, schedule) under state_dir."""

    def __init__(self, state_dir: str | Path = "data/import_mappings") -> None:
        self.state_dir = Path(state_dir)

    def path_for(self, event_id: str, schedule_id: str) -> Path:
        safe = re.sub(r"[^A-Za-z0-9._-]+", "_", make_store_key(event_id, schedule_id))
        return self.state_dir / f"{safe}.json"

    def read(self, event_id: str, schedule_id: str) -> list[ImportedRowMapping]:
        """Load the stored mapping; unreadable files read as no mapping."""
        path = self.path_for(event_id, schedule_id)
        if not path.exists():
            return []
        try:
            with open(path, encoding="utf-8") as f:
                state = json.load(f)
            rows = state.get("rows", []) if isinstance(state, dict) else state
            return [ImportedRowMapping.model_validate(row) for row in rows]
        except (OSError, ValueError, ValidationError, AttributeError, TypeError) as e:
            log.warning("mapping_store_unreadable", path=str(path), error=str(e))
            return []

    def write(
        self, event_id: str, schedule_id: str, rows: list[ImportedRowMapping]
    ) -> None:
        self.state_dir.mkdir(parents=True, exist_ok=True)
        state = {
            "saved_at": datetime.now(timezone.utc).isoformat(),
            "event_id": event_id,
            "schedule_id": schedule_id,
            "rows": [row.model_dump(mode="json") for row in rows],
        }
        path = self.path_for(event_id, schedule_id)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(state, f, indent=2, ensure_ascii=False)
        log.debug("mapping_store_written", path=str(path), rows=len(rows))
