"""Contracts for the external services an editing session depends on."""
from __future__ import annotations

from typing import Protocol

from src.domain.entities.generated_output import Resolution, SynthesizedImage
from src.domain.entities.scene import SceneDocument


class SceneAnalyzer(Protocol):
    async def analyze(self, image: str) -> SceneDocument:
        """Turn an image data URL into a scene document. Raises AnalysisError."""
        ...


class PromptSynthesizer(Protocol):
    async def generate_prompt(self, document: SceneDocument) -> str:
        """Raises PromptGenerationError."""
        ...


class ImageSynthesizer(Protocol):
    async def synthesize(
        self,
        document: SceneDocument,
        prompt: str,
        reference_image: str | None = None,
        resolution: Resolution | None = None,
    ) -> SynthesizedImage | None:
        """Returns None when the model produced no usable image.

        Raises SynthesisError, RateLimitError or ContentFilteredError.
        """
        ...
