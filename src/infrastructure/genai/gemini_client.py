"""Shared helpers for talking to Gemini through google-genai."""
from __future__ import annotations

import base64
import re

from google import genai
from google.genai import errors, types

from src.domain.errors import ContentFilteredError, RateLimitError, SynthesisError

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[^;,]+)?(?:;base64)?,(?P<data>.*)$", re.DOTALL)
_CODE_BLOCK_RE = re.compile(r"```(?:[\w-]*\n)?([\s\S]*?)```")

_RATE_LIMIT_MARKERS = ("quota", "rate limit", "rate-limit", "resource_exhausted")
_SAFETY_MARKERS = ("safety", "blocked")


def make_client(api_key: str | None) -> genai.Client:
    if not api_key:
        raise RuntimeError("Gemini API key not configured")
    return genai.Client(api_key=api_key)


def image_part(image: str) -> types.Part:
    """Inline image part from a data URL or bare base64 payload (JPEG assumed)."""
    match = _DATA_URL_RE.match(image)
    if match:
        mime_type = match.group("mime") or "image/jpeg"
        payload = match.group("data")
    else:
        mime_type, payload = "image/jpeg", image
    return types.Part.from_bytes(data=base64.b64decode(payload), mime_type=mime_type)


def to_data_url(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def extract_code_block(text: str) -> str:
    """Body of the first fenced code block, or the whole text when there is none."""
    match = _CODE_BLOCK_RE.search(text)
    return match.group(1).strip() if match else text.strip()


def strip_json_fence(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def first_inline_image(response: types.GenerateContentResponse) -> types.Blob | None:
    for candidate in response.candidates or []:
        content = candidate.content
        for part in (content.parts if content else None) or []:
            blob = part.inline_data
            if blob is not None and blob.data and blob.mime_type:
                return blob
    return None


def blocked_by_safety(response: types.GenerateContentResponse) -> bool:
    feedback = response.prompt_feedback
    if feedback is not None and feedback.block_reason:
        return True
    return any(
        c.finish_reason in (types.FinishReason.SAFETY, types.FinishReason.PROHIBITED_CONTENT)
        for c in response.candidates or []
    )


def classify_failure(exc: Exception) -> SynthesisError:
    """Map an exception raised by the image model to the matching synthesis error."""
    message = str(exc)
    lowered = message.lower()
    if isinstance(exc, errors.APIError) and exc.code == 429:
        return RateLimitError()
    if any(marker in lowered for marker in _RATE_LIMIT_MARKERS):
        return RateLimitError()
    if any(marker in lowered for marker in _SAFETY_MARKERS):
        return ContentFilteredError()
    return SynthesisError(message or None)
