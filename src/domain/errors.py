"""Error taxonomy for editing sessions and render requests."""
from __future__ import annotations


class ReframeError(Exception):
    """Base error carrying a message that is safe to show to the user."""

    default_message = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class SessionNotFoundError(ReframeError, LookupError):
    default_message = "Session not found"


class MissingSceneError(ReframeError, ValueError):
    default_message = "Scene data is required before rendering"


class NoImageError(ReframeError, ValueError):
    default_message = "No image provided"


class AnalysisError(ReframeError):
    default_message = "Analysis failed"


class PromptGenerationError(ReframeError):
    default_message = "Prompt generation failed"


class SynthesisError(ReframeError):
    default_message = "Failed to generate image"


class RateLimitError(SynthesisError):
    default_message = "Rate limit exceeded. Please wait a moment and try again."


class ContentFilteredError(SynthesisError):
    default_message = (
        "Content was filtered by safety settings. Try adjusting your scene parameters."
    )
