from __future__ import annotations

import logging
from collections import OrderedDict

from src.domain.entities.generated_output import GeneratedOutput
from src.domain.entities.scene import SceneDocument
from src.domain.services.fingerprint import scene_fingerprint

logger = logging.getLogger(__name__)


class GenerationCache:
    """In-memory memoization of generated outputs keyed by scene + prompt fingerprint.

    Entries never expire. When ``max_entries`` is set the least recently used
    entry is dropped on overflow; a dropped key simply misses again.
    """

    def __init__(self, max_entries: int | None = None) -> None:
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        self._entries: OrderedDict[str, GeneratedOutput] = OrderedDict()

    @staticmethod
    def key(document: SceneDocument, prompt: str) -> str:
        return scene_fingerprint(document, prompt)

    def get(self, key: str) -> GeneratedOutput | None:
        output = self._entries.get(key)
        if output is None:
            logger.debug("Generation cache miss for %s", key)
            return None
        self._entries.move_to_end(key)
        logger.debug("Generation cache hit for %s -> %s", key, output.id)
        return output

    def put(self, key: str, output: GeneratedOutput) -> None:
        # last write wins
        self._entries[key] = output
        self._entries.move_to_end(key)
        if self.max_entries is not None:
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted %s from generation cache", evicted)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
