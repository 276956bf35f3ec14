from __future__ import annotations

from enum import Enum
from typing import Callable, Iterable

from src.domain.entities.scene import SceneDocument, SceneObject


class ObjectMatching(str, Enum):
    ID = "id"
    POSITION = "position"  # legacy: pairs objects by list index


_Getter = Callable[[SceneDocument], object]

# identifier -> accessor for every tracked scalar field
SCALAR_FIELDS: dict[str, _Getter] = {
    "scene_description": lambda d: d.global_context.scene_description,
    "time_of_day": lambda d: d.global_context.time_of_day,
    "weather_atmosphere": lambda d: d.global_context.weather_atmosphere,
    "lighting_source": lambda d: d.global_context.lighting.source,
    "lighting_direction": lambda d: d.global_context.lighting.direction,
    "lighting_quality": lambda d: d.global_context.lighting.quality,
    "color_temp": lambda d: d.global_context.lighting.color_temp,
    "camera_angle": lambda d: d.composition.camera_angle,
    "framing": lambda d: d.composition.framing,
    "depth_of_field": lambda d: d.composition.depth_of_field,
    "focal_point": lambda d: d.composition.focal_point,
    "contrast_level": lambda d: d.color_palette.contrast_level,
}

# prefix -> accessor for every tracked list, compared index by index
LIST_FIELDS: dict[str, Callable[[SceneDocument], list[str]]] = {
    "color": lambda d: d.color_palette.dominant_hex_estimates,
    "accent": lambda d: d.color_palette.accent_colors,
    "relationship": lambda d: d.semantic_relationships,
}

OBJECT_FIELDS: dict[str, Callable[[SceneObject], object]] = {
    "label": lambda o: o.label,
    "category": lambda o: o.category,
    "location": lambda o: o.location,
    "prominence": lambda o: o.prominence,
    "color": lambda o: o.visual_attributes.color,
    "texture": lambda o: o.visual_attributes.texture,
    "material": lambda o: o.visual_attributes.material,
    "state": lambda o: o.visual_attributes.state,
    "dimensions_relative": lambda o: o.visual_attributes.dimensions_relative,
}


class SceneDiffService:
    """Finds the fields of a scene document that differ from its analyzed snapshot.

    Comparison is plain value equality. Lists are compared index by index and
    only over the indices both sides have. Objects are paired with their
    original counterpart either by ``id`` (default) or by list position; an
    object without a counterpart is skipped.
    """

    @staticmethod
    def diff(
        current: SceneDocument,
        original: SceneDocument,
        matching: ObjectMatching = ObjectMatching.ID,
    ) -> frozenset[str]:
        changed: set[str] = set()

        for key, get in SCALAR_FIELDS.items():
            if get(current) != get(original):
                changed.add(key)

        for prefix, get_list in LIST_FIELDS.items():
            for i, (now, before) in enumerate(zip(get_list(current), get_list(original))):
                if now != before:
                    changed.add(f"{prefix}_{i}")

        for obj, orig in SceneDiffService.pair_objects(current, original, matching):
            changed.update(SceneDiffService.diff_object(obj, orig))

        return frozenset(changed)

    @staticmethod
    def pair_objects(
        current: SceneDocument,
        original: SceneDocument,
        matching: ObjectMatching = ObjectMatching.ID,
    ) -> Iterable[tuple[SceneObject, SceneObject]]:
        if matching == ObjectMatching.POSITION:
            return list(zip(current.objects, original.objects))
        by_id = {o.id: o for o in original.objects}
        return [(o, by_id[o.id]) for o in current.objects if o.id in by_id]

    # Identifiers use the current object's id
    @staticmethod
    def diff_object(current: SceneObject, original: SceneObject) -> set[str]:
        return {
            f"object_{current.id}_{attr}"
            for attr, get in OBJECT_FIELDS.items()
            if get(current) != get(original)
        }

    @staticmethod
    def has_changes(
        current: SceneDocument,
        original: SceneDocument,
        matching: ObjectMatching = ObjectMatching.ID,
    ) -> bool:
        return bool(SceneDiffService.diff(current, original, matching))
