from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from src.application.dtos.render_dto import GeneratedOutputDTO
from src.domain.entities.generated_output import GeneratedOutput
from src.domain.entities.scene import SceneDocument
from src.domain.entities.version_history import HistoryEventType, VersionHistoryEntry


class HistoryItem(BaseModel):
    """A single event in a session's lineage."""
    id: str = Field(..., description="Unique identifier of the history entry", examples=["edit_3f9c2a1b7d4e"])
    type: HistoryEventType = Field(..., description="Event type: upload, analysis, edit or generation")
    description: str = Field(..., description="Human-readable summary of the event")
    created_at: datetime = Field(..., description="ISO timestamp when the event happened")
    output: GeneratedOutputDTO | None = Field(None, description="Generated output, for generation events")
    data: dict[str, Any] | None = Field(None, description="Event payload for upload, analysis and edit events")

    @classmethod
    def from_entity(cls, entry: VersionHistoryEntry) -> HistoryItem:
        output = None
        data: dict[str, Any] | None = None
        if isinstance(entry.data, GeneratedOutput):
            output = GeneratedOutputDTO.from_entity(entry.data)
        elif isinstance(entry.data, SceneDocument):
            data = {"scene": entry.data.model_dump(mode="json")}
        elif isinstance(entry.data, dict):
            data = entry.data
        return cls(
            id=entry.id,
            type=entry.type,
            description=entry.description,
            created_at=entry.created_at,
            output=output,
            data=data,
        )


class ListHistoryResponse(BaseModel):
    """Session lineage, newest first."""
    history: list[HistoryItem] = Field(..., description="History entries, newest first")
    total: int = Field(..., description="Number of matching entries before pagination", ge=0)


class ClearHistoryResponse(BaseModel):
    """Response model for clearing the lineage log."""
    ok: bool = Field(True, description="Indicates whether the log was cleared")
