from __future__ import annotations

import uuid
from dataclasses import dataclass

from src.domain.entities.version_history import HistoryEventType, VersionHistoryEntry
from src.domain.errors import NoImageError
from src.infrastructure.sessions.editing_session import EditingSession


@dataclass
class UploadImageUseCase:
    def execute(self, session: EditingSession, image: str) -> VersionHistoryEntry:
        """
        Start a new editing round from an uploaded image.

        The previous scene, its original snapshot, the prompt and the
        generation cache are discarded. The lineage log keeps growing.
        """
        if not image:
            raise NoImageError()
        source_image_id = f"source_{uuid.uuid4().hex[:12]}"
        session.reset_for_upload(image, source_image_id)
        return session.lineage.record(
            HistoryEventType.UPLOAD, "Image uploaded", data={"source_image_id": source_image_id}
        )
