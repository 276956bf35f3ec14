from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from src.domain.entities.render import PromptNeedsGeneration, PromptReady, PromptState, RenderState
from src.domain.entities.scene import SceneDocument
from src.domain.services.diff_service import ObjectMatching, SceneDiffService
from src.infrastructure.cache.generation_cache import GenerationCache
from src.infrastructure.lineage.lineage_log import LineageLog


@dataclass
class EditingSession:
    """Everything one UI client edits and renders against.

    The session owns its generation cache and lineage log; nothing is shared
    between sessions.
    """

    id: str
    cache: GenerationCache = field(default_factory=GenerationCache)
    lineage: LineageLog = field(default_factory=LineageLog)
    object_matching: ObjectMatching = ObjectMatching.ID
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    # Current upload
    image: str | None = None  # data URL of the uploaded image
    source_image_id: str | None = None
    epoch: int = 0  # bumped on every upload; stale renders compare against it
    # Scene state
    document: SceneDocument | None = None
    original: SceneDocument | None = None  # snapshot captured at analysis time
    prompt: PromptState = field(default_factory=PromptNeedsGeneration)
    render: RenderState = field(default_factory=RenderState)
    # fingerprint -> future of the request currently producing it
    in_flight: dict[str, asyncio.Future[Any]] = field(default_factory=dict)
    prompts_in_flight: dict[str, asyncio.Future[Any]] = field(default_factory=dict)

    @property
    def prompt_text(self) -> str | None:
        return self.prompt.text if isinstance(self.prompt, PromptReady) else None

    def changed_fields(self, matching: ObjectMatching | None = None) -> frozenset[str]:
        if self.document is None or self.original is None:
            return frozenset()
        return SceneDiffService.diff(self.document, self.original, matching or self.object_matching)

    @property
    def has_user_edits(self) -> bool:
        if self.document is None or self.original is None:
            return False
        return SceneDiffService.has_changes(self.document, self.original, self.object_matching)

    def invalidate_prompt(self) -> None:
        self.prompt = PromptNeedsGeneration()

    def reset_for_upload(self, image: str, source_image_id: str) -> None:
        self.epoch += 1
        self.image = image
        self.source_image_id = source_image_id
        self.document = None
        self.original = None
        self.invalidate_prompt()
        self.render.reset()
        self.cache.clear()
