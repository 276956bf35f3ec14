from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime

from google import genai
from google.genai import types
from pydantic import ValidationError

from src.domain.entities.generated_output import AUTO_RESOLUTION, Resolution, SynthesizedImage
from src.domain.entities.scene import SceneDocument
from src.domain.errors import AnalysisError, ContentFilteredError, PromptGenerationError
from src.infrastructure.genai.gemini_client import (
    blocked_by_safety,
    classify_failure,
    extract_code_block,
    first_inline_image,
    image_part,
    strip_json_fence,
    to_data_url,
)

logger = logging.getLogger(__name__)

ANALYSIS_INSTRUCTIONS = """Analyze this image and describe it as a single JSON object with the keys
meta, global_context, color_palette, composition, objects, text_ocr and
semantic_relationships. Give every object a short stable "id". Answer with JSON only."""

PROMPT_INSTRUCTIONS = """Convert the following JSON scene blueprint into one image generation
prompt. Return the prompt inside a single fenced code block."""


class GeminiSceneAnalyzer:
    def __init__(self, client: genai.Client, model: str) -> None:
        self.client = client
        self.model = model

    async def analyze(self, image: str) -> SceneDocument:
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=[ANALYSIS_INSTRUCTIONS, image_part(image)],
                config=types.GenerateContentConfig(response_mime_type="application/json"),
            )
        except Exception as exc:
            raise AnalysisError(str(exc) or None) from exc

        text = response.text or ""
        try:
            return SceneDocument.model_validate_json(strip_json_fence(text))
        except ValidationError as exc:
            logger.warning("Failed to parse scene analysis: %s; raw response: %s", exc, text)
            raise AnalysisError("Failed to parse scene analysis") from exc


class GeminiPromptSynthesizer:
    def __init__(self, client: genai.Client, model: str) -> None:
        self.client = client
        self.model = model

    async def generate_prompt(self, document: SceneDocument) -> str:
        blueprint = json.dumps(document.model_dump(mode="json"), indent=2)
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=f"{PROMPT_INSTRUCTIONS}\n\n{blueprint}",
            )
        except Exception as exc:
            raise PromptGenerationError(str(exc) or None) from exc
        text = response.text or ""
        if not text.strip():
            raise PromptGenerationError("Prompt model returned no text")
        return extract_code_block(text)


def build_generation_prompt(
    document: SceneDocument, prompt: str, resolution: Resolution | None
) -> str:
    ctx = document.global_context
    lighting = ctx.lighting
    lines = [
        "Generate an image derived from this scene understanding.",
        f"Scene: {ctx.scene_description}",
        f"Time: {ctx.time_of_day}",
        f"Atmosphere: {ctx.weather_atmosphere}",
        f"Lighting: {lighting.source}, {lighting.direction}, {lighting.quality}, {lighting.color_temp}",
        f"Dominant colors: {', '.join(document.color_palette.dominant_hex_estimates[:5])}",
        f"Composition: {document.composition.camera_angle}, {document.composition.framing}",
        f"Focal point: {document.composition.focal_point}",
        f"Key objects: {', '.join(o.label for o in document.objects[:5])}",
        "",
        "User refinement prompt:",
        prompt,
    ]
    if resolution is not None:
        lines.append(f"Target resolution: {resolution.value}.")
    return "\n".join(lines)


class GeminiImageSynthesizer:
    def __init__(self, client: genai.Client, model: str) -> None:
        self.client = client
        self.model = model

    async def synthesize(
        self,
        document: SceneDocument,
        prompt: str,
        reference_image: str | None = None,
        resolution: Resolution | None = None,
    ) -> SynthesizedImage | None:
        contents: list[str | types.Part] = [build_generation_prompt(document, prompt, resolution)]
        if reference_image:
            contents.append(image_part(reference_image))

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=contents,
                config=types.GenerateContentConfig(response_modalities=["TEXT", "IMAGE"]),
            )
        except Exception as exc:
            raise classify_failure(exc) from exc

        blob = first_inline_image(response)
        if blob is None:
            if blocked_by_safety(response):
                raise ContentFilteredError()
            logger.warning("Image model returned no image; text response: %s", response.text)
            return None

        return SynthesizedImage(
            artifact_id=f"rf_{uuid.uuid4().hex[:16]}",
            image_url=to_data_url(blob.data, blob.mime_type),
            model=self.model,
            resolution=resolution.value if resolution else AUTO_RESOLUTION,
            created_at=datetime.now(UTC),
        )
