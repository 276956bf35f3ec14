from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from src.application.use_cases.analyze_scene import AnalyzeSceneUseCase
from src.application.use_cases.edit_scene import EditSceneUseCase
from src.application.use_cases.render_output import RenderOutputUseCase
from src.application.use_cases.upload_image import UploadImageUseCase
from src.domain.errors import SessionNotFoundError
from src.domain.services.collaborators import ImageSynthesizer, PromptSynthesizer, SceneAnalyzer
from src.infrastructure.config import Settings
from src.infrastructure.genai.gemini_client import make_client
from src.infrastructure.genai.gemini_collaborators import (
    GeminiImageSynthesizer,
    GeminiPromptSynthesizer,
    GeminiSceneAnalyzer,
)
from src.infrastructure.genai.offline_collaborators import (
    OfflineImageSynthesizer,
    OfflinePromptSynthesizer,
    OfflineSceneAnalyzer,
)
from src.infrastructure.sessions.editing_session import EditingSession
from src.infrastructure.sessions.session_store import SessionStore


class Collaborators:
    """External services shared by every session of the app."""

    def __init__(
        self,
        analyzer: SceneAnalyzer,
        prompt_synthesizer: PromptSynthesizer,
        image_synthesizer: ImageSynthesizer,
    ) -> None:
        self.analyzer = analyzer
        self.prompt_synthesizer = prompt_synthesizer
        self.image_synthesizer = image_synthesizer

    @classmethod
    def from_settings(cls, settings: Settings) -> Collaborators:
        if settings.genai_disabled:
            return cls(OfflineSceneAnalyzer(), OfflinePromptSynthesizer(), OfflineImageSynthesizer())
        client = make_client(settings.gemini_api_key)
        return cls(
            GeminiSceneAnalyzer(client, settings.text_model),
            GeminiPromptSynthesizer(client, settings.text_model),
            GeminiImageSynthesizer(client, settings.image_model),
        )


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_collaborators(request: Request) -> Collaborators:
    return request.app.state.collaborators


def get_session(
    session_id: str,
    store: Annotated[SessionStore, Depends(get_session_store)],
) -> EditingSession:
    try:
        return store.get(session_id)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message)


def get_upload_use_case() -> UploadImageUseCase:
    return UploadImageUseCase()


def get_edit_use_case() -> EditSceneUseCase:
    return EditSceneUseCase()


def get_analyze_use_case(
    collaborators: Annotated[Collaborators, Depends(get_collaborators)],
) -> AnalyzeSceneUseCase:
    return AnalyzeSceneUseCase(analyzer=collaborators.analyzer)


def get_render_use_case(
    collaborators: Annotated[Collaborators, Depends(get_collaborators)],
) -> RenderOutputUseCase:
    return RenderOutputUseCase(
        prompt_synthesizer=collaborators.prompt_synthesizer,
        image_synthesizer=collaborators.image_synthesizer,
    )
