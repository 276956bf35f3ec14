from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from src.application.dtos.render_dto import RenderStateResponse
from src.domain.entities.scene import SceneDocument


class SessionResponse(BaseModel):
    """Summary of an editing session."""
    id: str = Field(..., description="Session identifier", examples=["sess_4c1f0e0a9b8d4f7e"])
    created_at: datetime = Field(..., description="ISO timestamp when the session was created")
    source_image_id: str | None = Field(None, description="Identifier of the current upload")
    has_image: bool = Field(..., description="True once an image was uploaded")
    has_scene: bool = Field(..., description="True once the image was analyzed")
    has_user_edits: bool = Field(..., description="True when the scene differs from its analysis")
    prompt: str | None = Field(None, description="Current prompt, if one is available")
    render: RenderStateResponse
    history_size: int = Field(..., description="Number of lineage entries", ge=0)


class UploadRequest(BaseModel):
    """Request model for uploading an image."""
    image: str = Field(..., description="Image as a data URL", min_length=1, examples=["data:image/png;base64,iVBORw0..."])


class UploadResponse(BaseModel):
    source_image_id: str = Field(..., description="Identifier assigned to the upload")
    history_id: str = Field(..., description="Lineage entry recorded for the upload")


class SceneResponse(BaseModel):
    """Current scene and the fields that differ from its analysis."""
    scene: SceneDocument
    changed_fields: list[str] = Field(..., description="Changed-field identifiers, sorted")


class DiffResponse(BaseModel):
    changed_fields: list[str] = Field(
        ..., description="Changed-field identifiers, sorted", examples=[["time_of_day", "object_obj_1_state"]]
    )
    matching: str = Field(..., description="Object pairing used: id or position")


class PromptRequest(BaseModel):
    prompt: str = Field(..., description="Prompt text to render with", min_length=1)


class PromptResponse(BaseModel):
    prompt: str | None = Field(None, description="Current prompt; null when one must be generated")
