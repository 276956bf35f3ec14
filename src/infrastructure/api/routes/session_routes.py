from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from src.application.dtos.common_dto import SuccessResponse
from src.application.dtos.render_dto import GeneratedOutputDTO, RenderStateResponse
from src.application.dtos.session_dto import (
    DiffResponse,
    PromptRequest,
    PromptResponse,
    SceneResponse,
    SessionResponse,
    UploadRequest,
    UploadResponse,
)
from src.application.use_cases.analyze_scene import AnalyzeSceneUseCase, record_analysis
from src.application.use_cases.edit_scene import EditSceneUseCase
from src.application.use_cases.upload_image import UploadImageUseCase
from src.domain.entities.render import PromptReady
from src.domain.entities.scene import SceneDocument
from src.domain.errors import MissingSceneError, ReframeError
from src.domain.services.diff_service import ObjectMatching
from src.infrastructure.api.dependencies import (
    get_analyze_use_case,
    get_edit_use_case,
    get_session,
    get_session_store,
    get_upload_use_case,
)
from src.infrastructure.api.errors import to_http_exception
from src.infrastructure.sessions.editing_session import EditingSession
from src.infrastructure.sessions.session_store import SessionStore

router = APIRouter(
    prefix="/sessions",
    tags=["Editing Sessions"],
    responses={
        400: {"description": "Bad Request - Missing image or scene"},
        404: {"description": "Not Found - Session does not exist"},
        422: {"description": "Validation Error - Invalid request format"},
    },
)


def session_summary(session: EditingSession) -> SessionResponse:
    output = session.render.output
    return SessionResponse(
        id=session.id,
        created_at=session.created_at,
        source_image_id=session.source_image_id,
        has_image=session.image is not None,
        has_scene=session.document is not None,
        has_user_edits=session.has_user_edits,
        prompt=session.prompt_text,
        render=RenderStateResponse(
            status=session.render.status,
            output=GeneratedOutputDTO.from_entity(output) if output else None,
            error=session.render.error,
        ),
        history_size=len(session.lineage),
    )


def scene_response(session: EditingSession, changed: frozenset[str]) -> SceneResponse:
    if session.document is None:
        raise to_http_exception(MissingSceneError("Session has no analyzed scene"))
    return SceneResponse(scene=session.document, changed_fields=sorted(changed))


@router.post(
    "",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Editing Session",
    description="Start an empty editing session with its own generation cache and lineage log.",
)
async def create_session(store: SessionStore = Depends(get_session_store)):
    return session_summary(store.create())


@router.get("/{session_id}", response_model=SessionResponse, summary="Get Session Summary")
async def get_session_summary(session: EditingSession = Depends(get_session)):
    return session_summary(session)


@router.delete("/{session_id}", response_model=SuccessResponse, summary="Delete Session")
async def delete_session(
    session: EditingSession = Depends(get_session),
    store: SessionStore = Depends(get_session_store),
):
    store.delete(session.id)
    return SuccessResponse(ok=True)


@router.post(
    "/{session_id}/upload",
    response_model=UploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload Image",
    description="""
    Upload a new image as a data URL.

    Replaces the current scene, its analyzed snapshot, the prompt and the
    generation cache. The lineage log keeps its entries and records the upload.
    """,
)
async def upload_image(
    body: UploadRequest,
    session: EditingSession = Depends(get_session),
    uc: UploadImageUseCase = Depends(get_upload_use_case),
):
    try:
        entry = uc.execute(session, body.image)
    except ReframeError as exc:
        raise to_http_exception(exc)
    return UploadResponse(source_image_id=session.source_image_id, history_id=entry.id)


@router.post(
    "/{session_id}/analyze",
    response_model=SceneResponse,
    summary="Analyze Uploaded Image",
    description="Run scene analysis on the uploaded image and keep the result as the original snapshot.",
)
async def analyze_image(
    session: EditingSession = Depends(get_session),
    uc: AnalyzeSceneUseCase = Depends(get_analyze_use_case),
):
    try:
        await uc.execute(session)
    except ReframeError as exc:
        raise to_http_exception(exc)
    return scene_response(session, frozenset())


@router.put(
    "/{session_id}/analysis",
    response_model=SceneResponse,
    summary="Record Analysis",
    description="Install an externally produced scene analysis as the original snapshot.",
)
async def put_analysis(body: SceneDocument, session: EditingSession = Depends(get_session)):
    record_analysis(session, body)
    return scene_response(session, frozenset())


@router.get("/{session_id}/scene", response_model=SceneResponse, summary="Get Current Scene")
async def get_scene(session: EditingSession = Depends(get_session)):
    return scene_response(session, session.changed_fields())


@router.put(
    "/{session_id}/scene",
    response_model=SceneResponse,
    summary="Edit Scene",
    description="Replace the current scene with an edited version and return the changed fields.",
)
async def edit_scene(
    body: SceneDocument,
    session: EditingSession = Depends(get_session),
    uc: EditSceneUseCase = Depends(get_edit_use_case),
):
    try:
        changed = uc.execute(session, body)
    except ReframeError as exc:
        raise to_http_exception(exc)
    return scene_response(session, changed)


@router.get(
    "/{session_id}/diff",
    response_model=DiffResponse,
    summary="Changed Fields",
    description="Identifiers of every field that differs from the analyzed original.",
)
async def get_diff(
    session: EditingSession = Depends(get_session),
    matching: ObjectMatching | None = Query(
        None, description="Object pairing: 'id' (default) or legacy 'position'"
    ),
):
    used = matching or session.object_matching
    return DiffResponse(changed_fields=sorted(session.changed_fields(used)), matching=used.value)


@router.get("/{session_id}/prompt", response_model=PromptResponse, summary="Get Prompt")
async def get_prompt(session: EditingSession = Depends(get_session)):
    return PromptResponse(prompt=session.prompt_text)


@router.put("/{session_id}/prompt", response_model=PromptResponse, summary="Set Prompt")
async def put_prompt(body: PromptRequest, session: EditingSession = Depends(get_session)):
    session.prompt = PromptReady(body.prompt)
    return PromptResponse(prompt=session.prompt_text)


@router.delete(
    "/{session_id}/prompt",
    response_model=PromptResponse,
    summary="Invalidate Prompt",
    description="Drop the current prompt; the next render generates a fresh one.",
)
async def delete_prompt(session: EditingSession = Depends(get_session)):
    session.invalidate_prompt()
    return PromptResponse(prompt=None)
