from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from src.domain.entities.generated_output import GeneratedOutput, Resolution
from src.domain.entities.render import RenderStatus
from src.domain.entities.scene import SceneDocument


class GenerationMetadataDTO(BaseModel):
    model: str = Field(..., description="Model that produced the image", examples=["gemini-2.0-flash-exp"])
    resolution: str = Field(..., description="Requested resolution, or 'auto'", examples=["1024x1024"])
    prompt_snapshot: str = Field(..., description="Exact prompt text used for the render")


class GeneratedOutputDTO(BaseModel):
    """A rendered image and the inputs it was derived from."""
    id: str = Field(..., description="Unique identifier of the output", examples=["rf_1a2b3c4d5e6f7a8b"])
    image_url: str = Field(..., description="Data URL or reference of the rendered image")
    created_at: datetime = Field(..., description="ISO timestamp when the output was created")
    metadata: GenerationMetadataDTO
    source_image_id: str | None = Field(None, description="Upload the output was derived from")
    scene_snapshot: SceneDocument | None = Field(None, description="Scene document used for the render")

    @classmethod
    def from_entity(cls, output: GeneratedOutput) -> GeneratedOutputDTO:
        return cls(
            id=output.id,
            image_url=output.image_url,
            created_at=output.created_at,
            metadata=GenerationMetadataDTO(
                model=output.metadata.model,
                resolution=output.metadata.resolution,
                prompt_snapshot=output.metadata.prompt_snapshot,
            ),
            source_image_id=output.source_image_id,
            scene_snapshot=output.scene_snapshot,
        )


class RenderRequestDTO(BaseModel):
    """Request model for rendering the current scene."""
    resolution: Resolution | None = Field(
        None, description="Target resolution; omitted means the model decides", examples=["1024x1024"]
    )


class RenderResponse(BaseModel):
    """Render result."""
    status: RenderStatus = Field(..., description="Render state after the request")
    output: GeneratedOutputDTO | None = Field(None, description="Rendered output when complete")
    prompt: str | None = Field(None, description="Prompt the render used")
    cached: bool = Field(False, description="True when the output came from the generation cache")


class RenderStateResponse(BaseModel):
    """Current render state of a session."""
    status: RenderStatus = Field(..., description="idle, generating, complete or error")
    output: GeneratedOutputDTO | None = Field(None, description="Most recent output")
    error: str | None = Field(None, description="Error message when status is error")
