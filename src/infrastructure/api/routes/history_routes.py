from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from src.application.dtos.history_dto import ClearHistoryResponse, HistoryItem, ListHistoryResponse
from src.domain.entities.version_history import HistoryEventType
from src.infrastructure.api.dependencies import get_session
from src.infrastructure.sessions.editing_session import EditingSession

router = APIRouter(
    prefix="/sessions/{session_id}/history",
    tags=["Version History"],
    responses={
        404: {"description": "Not Found - Session or output does not exist"},
        422: {"description": "Validation Error - Invalid request format"},
    },
)


@router.get(
    "",
    response_model=ListHistoryResponse,
    summary="List Version History",
    description="""
    Lineage of the session: uploads, analyses, edits and renders.

    **Features:**
    - Results sorted newest first
    - Optional filtering by event type
    - Paginated with limit and offset
    """,
)
async def list_history(
    session: EditingSession = Depends(get_session),
    limit: int = Query(50, ge=1, le=200, description="Maximum number of entries to return (1-200)"),
    offset: int = Query(0, ge=0, description="Number of entries to skip from the newest"),
    event_type: HistoryEventType | None = Query(
        None, alias="type", description="Only return entries of this type"
    ),
):
    items = session.lineage.all()
    if event_type is not None:
        items = [e for e in items if e.type == event_type]
    page = items[offset : offset + limit]
    return ListHistoryResponse(
        history=[HistoryItem.from_entity(e) for e in page], total=len(items)
    )


@router.delete(
    "",
    response_model=ClearHistoryResponse,
    summary="Clear Version History",
    description="Empty the lineage log. Entries cannot be deleted one by one.",
)
async def clear_history(session: EditingSession = Depends(get_session)):
    session.lineage.clear()
    return ClearHistoryResponse(ok=True)


@router.get(
    "/{output_id}/provenance",
    response_model=ListHistoryResponse,
    summary="Output Provenance",
    description="The render of `output_id` and every earlier event back to its upload, newest first.",
)
async def get_provenance(output_id: str, session: EditingSession = Depends(get_session)):
    chain = session.lineage.provenance(output_id)
    if not chain:
        raise HTTPException(status_code=404, detail="Output not found in history")
    return ListHistoryResponse(
        history=[HistoryItem.from_entity(e) for e in chain], total=len(chain)
    )
