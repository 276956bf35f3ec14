"""Deterministic stand-ins for the Gemini collaborators.

Used when GENAI_DISABLED=1 (local development without an API key, tests).
"""
from __future__ import annotations

import hashlib
from datetime import UTC, datetime

from src.domain.entities.generated_output import AUTO_RESOLUTION, Resolution, SynthesizedImage
from src.domain.entities.scene import (
    ColorPalette,
    Composition,
    GlobalContext,
    Lighting,
    SceneDocument,
    SceneObject,
    VisualAttributes,
)
from src.domain.errors import NoImageError

# 1x1 transparent PNG
_PLACEHOLDER_PNG = (
    "data:image/png;base64,"
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)

OFFLINE_MODEL = "offline-placeholder"


class OfflineSceneAnalyzer:
    async def analyze(self, image: str) -> SceneDocument:
        if not image:
            raise NoImageError()
        return SceneDocument(
            global_context=GlobalContext(
                scene_description="A quiet street corner",
                time_of_day="Day",
                weather_atmosphere="Clear",
                lighting=Lighting(
                    source="Sunlight", direction="Side-lit", quality="Soft", color_temp="Warm"
                ),
            ),
            color_palette=ColorPalette(
                dominant_hex_estimates=["#8A9BA8", "#D9C7A1", "#3B3B3B"],
                accent_colors=["#C0392B"],
                contrast_level="Medium",
            ),
            composition=Composition(
                camera_angle="Eye-level",
                framing="Wide-shot",
                depth_of_field="Deep",
                focal_point="Red door",
            ),
            objects=[
                SceneObject(
                    id="obj_1",
                    label="Door",
                    category="Architecture",
                    location="Center",
                    prominence="Foreground",
                    visual_attributes=VisualAttributes(
                        color="Red",
                        texture="Smooth",
                        material="Wood",
                        state="Closed",
                        dimensions_relative="Medium",
                    ),
                ),
            ],
            semantic_relationships=["Door is set into a brick wall"],
        )


class OfflinePromptSynthesizer:
    async def generate_prompt(self, document: SceneDocument) -> str:
        ctx = document.global_context
        labels = ", ".join(o.label for o in document.objects) or "no distinct objects"
        return f"{ctx.scene_description} at {ctx.time_of_day}, {ctx.weather_atmosphere}; featuring {labels}"


class OfflineImageSynthesizer:
    async def synthesize(
        self,
        document: SceneDocument,
        prompt: str,
        reference_image: str | None = None,
        resolution: Resolution | None = None,
    ) -> SynthesizedImage | None:
        digest = hashlib.sha256(f"{document.model_dump_json()}\x00{prompt}".encode()).hexdigest()
        return SynthesizedImage(
            artifact_id=f"rf_{digest[:16]}",
            image_url=_PLACEHOLDER_PNG,
            model=OFFLINE_MODEL,
            resolution=resolution.value if resolution else AUTO_RESOLUTION,
            created_at=datetime.now(UTC),
        )
