from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import Any

from src.domain.entities.generated_output import GeneratedOutput
from src.domain.entities.version_history import HistoryEventType, VersionHistoryEntry

logger = logging.getLogger(__name__)


class LineageLog:
    """Append-only event log for one editing session.

    Entries are stored oldest-first and read newest-first. ``clear`` is the
    only removal.
    """

    def __init__(self) -> None:
        self._entries: list[VersionHistoryEntry] = []

    def append(self, entry: VersionHistoryEntry) -> None:
        self._entries.append(entry)
        logger.info("Lineage %s: %s (%s)", entry.type.value, entry.description, entry.id)

    def record(
        self, event_type: HistoryEventType, description: str, data: Any = None
    ) -> VersionHistoryEntry:
        """Build a timestamped entry for ``event_type`` and append it."""
        entry = VersionHistoryEntry(
            id=f"{event_type.value}_{uuid.uuid4().hex[:12]}",
            type=event_type,
            created_at=datetime.now(UTC),
            description=description,
            data=data,
        )
        self.append(entry)
        return entry

    def record_generation(self, output: GeneratedOutput) -> VersionHistoryEntry:
        entry = VersionHistoryEntry(
            id=output.id,
            type=HistoryEventType.GENERATION,
            created_at=output.created_at,
            description="Rendered reframed output",
            data=output,
        )
        self.append(entry)
        return entry

    def all(self) -> list[VersionHistoryEntry]:
        return list(reversed(self._entries))

    def get(self, entry_id: str) -> VersionHistoryEntry | None:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def provenance(self, output_id: str) -> list[VersionHistoryEntry]:
        """Generation entry for ``output_id`` and the events that led to it, newest first.

        The chain stops at the upload that started the session state the
        output was rendered from. Returns an empty list for unknown outputs.
        """
        for idx in range(len(self._entries) - 1, -1, -1):
            entry = self._entries[idx]
            if entry.type == HistoryEventType.GENERATION and entry.id == output_id:
                break
        else:
            return []

        chain: list[VersionHistoryEntry] = [self._entries[idx]]
        for earlier in reversed(self._entries[:idx]):
            if earlier.type == HistoryEventType.GENERATION:
                continue
            chain.append(earlier)
            if earlier.type == HistoryEventType.UPLOAD:
                break
        return chain

    def clear(self) -> None:
        self._entries.clear()
        logger.info("Lineage log cleared")

    def __len__(self) -> int:
        return len(self._entries)
