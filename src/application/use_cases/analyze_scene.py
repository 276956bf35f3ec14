from __future__ import annotations

import logging
from dataclasses import dataclass

from src.domain.entities.scene import SceneDocument
from src.domain.entities.version_history import HistoryEventType, VersionHistoryEntry
from src.domain.errors import AnalysisError, NoImageError
from src.domain.services.collaborators import SceneAnalyzer
from src.infrastructure.sessions.editing_session import EditingSession

logger = logging.getLogger(__name__)


def record_analysis(session: EditingSession, document: SceneDocument) -> VersionHistoryEntry:
    """Install ``document`` as both the current scene and its original snapshot."""
    session.original = document.snapshot()
    session.document = document.snapshot()
    session.invalidate_prompt()
    session.render.reset()
    return session.lineage.record(
        HistoryEventType.ANALYSIS, "Scene analyzed", data=session.original
    )


@dataclass
class AnalyzeSceneUseCase:
    analyzer: SceneAnalyzer

    async def execute(self, session: EditingSession) -> SceneDocument:
        if not session.image:
            raise NoImageError()
        epoch = session.epoch
        try:
            document = await self.analyzer.analyze(session.image)
        except AnalysisError:
            raise
        except Exception as exc:
            logger.exception("Scene analyzer raised unexpectedly")
            raise AnalysisError(str(exc) or None) from exc
        if session.epoch != epoch:
            raise AnalysisError("Analysis superseded by a new upload")
        record_analysis(session, document)
        return session.document
