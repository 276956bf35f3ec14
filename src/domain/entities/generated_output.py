from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from src.domain.entities.scene import SceneDocument


class Resolution(str, Enum):
    SMALL = "512x512"
    MEDIUM = "768x768"
    LARGE = "1024x1024"


AUTO_RESOLUTION = "auto"


@dataclass(frozen=True)
class GenerationMetadata:
    model: str
    resolution: str  # one of Resolution values, or "auto" when none was requested
    prompt_snapshot: str  # exact prompt text sent to the image model


@dataclass(frozen=True)
class SynthesizedImage:
    """Raw result returned by the image synthesis collaborator."""

    artifact_id: str
    image_url: str  # data URL or storage reference
    model: str
    resolution: str
    created_at: datetime


@dataclass(frozen=True)
class GeneratedOutput:
    id: str
    image_url: str
    created_at: datetime
    metadata: GenerationMetadata
    # Lineage, attached once right after creation
    source_image_id: str | None = None
    scene_snapshot: SceneDocument | None = None

    @classmethod
    def from_synthesis(cls, result: SynthesizedImage, prompt: str) -> GeneratedOutput:
        return cls(
            id=result.artifact_id,
            image_url=result.image_url,
            created_at=result.created_at,
            metadata=GenerationMetadata(
                model=result.model,
                resolution=result.resolution,
                prompt_snapshot=prompt,
            ),
        )

    @property
    def is_linked(self) -> bool:
        return self.scene_snapshot is not None

    def with_lineage(self, source_image_id: str | None, scene: SceneDocument) -> GeneratedOutput:
        """Return a copy linked to the source image and the scene that produced it.

        Raises:
            ValueError: If the output already carries lineage.
        """
        if self.is_linked:
            raise ValueError(f"Output {self.id} is already linked to its source")
        return replace(self, source_image_id=source_image_id, scene_snapshot=scene.snapshot())
