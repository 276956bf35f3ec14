from __future__ import annotations

from dataclasses import dataclass

from src.domain.entities.scene import SceneDocument
from src.domain.entities.version_history import HistoryEventType
from src.domain.errors import MissingSceneError
from src.domain.services.diff_service import SceneDiffService
from src.infrastructure.sessions.editing_session import EditingSession


@dataclass
class EditSceneUseCase:
    def execute(self, session: EditingSession, document: SceneDocument) -> frozenset[str]:
        """
        Replace the session's scene with the user's edited version.

        Returns the fields that now differ from the analyzed original. An
        ``edit`` lineage entry is recorded only when the scene actually
        changed; any change invalidates the current prompt.
        """
        if session.document is None or session.original is None:
            raise MissingSceneError("Analyze an image before editing its scene")

        if document == session.document:
            return session.changed_fields()

        step = SceneDiffService.diff(document, session.document, session.object_matching)
        session.document = document.snapshot()
        session.invalidate_prompt()

        changed = session.changed_fields()
        if step:
            description = f"Scene modified ({', '.join(sorted(step))})"
        else:
            description = "Scene modified"
        session.lineage.record(
            HistoryEventType.EDIT,
            description,
            data={"changed_fields": sorted(changed)},
        )
        return changed
