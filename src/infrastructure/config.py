from __future__ import annotations

import os
from dataclasses import dataclass

from src.domain.services.diff_service import ObjectMatching


def _optional_int(value: str | None) -> int | None:
    if not value:
        return None
    parsed = int(value)
    return parsed if parsed > 0 else None


@dataclass(frozen=True)
class Settings:
    env: str = "development"
    log_level: str = "INFO"
    gemini_api_key: str | None = None
    genai_disabled: bool = False
    text_model: str = "gemini-2.0-flash"
    image_model: str = "gemini-2.0-flash-exp"
    cache_max_entries: int | None = None  # None = unbounded
    object_matching: ObjectMatching = ObjectMatching.ID

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            env=os.getenv("ENV", "development"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
            genai_disabled=os.getenv("GENAI_DISABLED", "0") == "1",
            text_model=os.getenv("GEMINI_TEXT_MODEL", "gemini-2.0-flash"),
            image_model=os.getenv("GEMINI_IMAGE_MODEL", "gemini-2.0-flash-exp"),
            cache_max_entries=_optional_int(os.getenv("GENERATION_CACHE_MAX_ENTRIES")),
            object_matching=ObjectMatching(os.getenv("OBJECT_MATCHING", "id").lower()),
        )
