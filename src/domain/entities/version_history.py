from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class HistoryEventType(str, Enum):
    UPLOAD = "upload"
    ANALYSIS = "analysis"
    EDIT = "edit"
    GENERATION = "generation"


@dataclass(frozen=True)
class VersionHistoryEntry:
    id: str
    type: HistoryEventType
    created_at: datetime
    description: str
    # SceneDocument for analysis, changed field ids for edit,
    # GeneratedOutput for generation, image reference for upload
    data: Any = None
