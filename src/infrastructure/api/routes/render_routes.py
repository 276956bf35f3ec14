from __future__ import annotations

from fastapi import APIRouter, Depends

from src.application.dtos.render_dto import (
    GeneratedOutputDTO,
    RenderRequestDTO,
    RenderResponse,
    RenderStateResponse,
)
from src.application.use_cases.render_output import RenderOutputUseCase
from src.domain.entities.render import RenderRequest
from src.infrastructure.api.dependencies import get_render_use_case, get_session
from src.infrastructure.api.errors import to_http_exception
from src.infrastructure.sessions.editing_session import EditingSession

router = APIRouter(
    prefix="/sessions/{session_id}/render",
    tags=["Rendering"],
    responses={
        400: {"description": "Bad Request - No scene, or content filtered by safety settings"},
        404: {"description": "Not Found - Session does not exist"},
        429: {"description": "Too Many Requests - Image model rate limit hit"},
        502: {"description": "Bad Gateway - Prompt or image model failed"},
    },
)


def render_state(session: EditingSession) -> RenderStateResponse:
    output = session.render.output
    return RenderStateResponse(
        status=session.render.status,
        output=GeneratedOutputDTO.from_entity(output) if output else None,
        error=session.render.error,
    )


@router.post(
    "",
    response_model=RenderResponse,
    summary="Render Reframed Output",
    description="""
    Render the session's current scene.

    **How It Works:**
    1. Uses the session prompt, generating one first when there is none
    2. Returns the cached output when this exact scene and prompt were rendered before
    3. Otherwise calls the image model, links the result to its source upload
       and scene, caches it and records it in the lineage log

    Failures leave the cache and lineage log untouched.
    """,
)
async def render_output(
    body: RenderRequestDTO | None = None,
    session: EditingSession = Depends(get_session),
    uc: RenderOutputUseCase = Depends(get_render_use_case),
):
    request = RenderRequest(resolution=body.resolution if body else None)
    outcome = await uc.execute(session, request)
    if not outcome.ok:
        raise to_http_exception(outcome.error)
    return RenderResponse(
        status=outcome.status,
        output=GeneratedOutputDTO.from_entity(outcome.output),
        prompt=outcome.prompt,
        cached=outcome.cached,
    )


@router.get("", response_model=RenderStateResponse, summary="Get Render State")
async def get_render_state(session: EditingSession = Depends(get_session)):
    return render_state(session)


@router.post(
    "/accept",
    response_model=RenderStateResponse,
    summary="Accept Output",
    description="Keep the current output and return the render state to idle.",
)
async def accept_output(session: EditingSession = Depends(get_session)):
    session.render.reset(keep_output=True)
    return render_state(session)


@router.post(
    "/discard",
    response_model=RenderStateResponse,
    summary="Discard Output",
    description="Drop the current output and return the render state to idle. Cached outputs are kept.",
)
async def discard_output(session: EditingSession = Depends(get_session)):
    session.render.reset()
    return render_state(session)
