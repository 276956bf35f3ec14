from __future__ import annotations

import hashlib
import json

from src.domain.entities.scene import SceneDocument


def canonical_scene_json(document: SceneDocument) -> str:
    # Declared field order and list order are preserved; no key sorting.
    return json.dumps(
        document.model_dump(mode="json"),
        ensure_ascii=False,
        separators=(",", ":"),
    )


def scene_fingerprint(document: SceneDocument, prompt: str) -> str:
    """Content key over the full scene document and the literal prompt text."""
    digest = hashlib.sha256()
    digest.update(canonical_scene_json(document).encode("utf-8"))
    digest.update(b"\x00")
    digest.update(prompt.encode("utf-8"))
    return f"fp_{digest.hexdigest()}"
