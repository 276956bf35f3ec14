from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Prominence(str, Enum):
    FOREGROUND = "Foreground"
    MIDGROUND = "Midground"
    BACKGROUND = "Background"


class _SceneModel(BaseModel):
    # Analysis output may carry keys we do not track; keep them so the
    # fingerprint covers the full document.
    model_config = ConfigDict(extra="allow")


class ImageMeta(_SceneModel):
    image_quality: str = "Medium"
    image_type: str = "Photo"
    resolution_estimation: str | None = None


class Lighting(_SceneModel):
    source: str = ""
    direction: str = ""
    quality: str = ""
    color_temp: str = ""


class GlobalContext(_SceneModel):
    scene_description: str = ""
    time_of_day: str = ""
    weather_atmosphere: str = ""
    lighting: Lighting = Field(default_factory=Lighting)


class ColorPalette(_SceneModel):
    dominant_hex_estimates: list[str] = Field(default_factory=list)
    accent_colors: list[str] = Field(default_factory=list)
    contrast_level: str = "Medium"


class Composition(_SceneModel):
    camera_angle: str = ""
    framing: str = ""
    depth_of_field: str = ""
    focal_point: str = ""


class VisualAttributes(_SceneModel):
    color: str = ""
    texture: str = ""
    material: str = ""
    state: str = ""
    dimensions_relative: str = ""


class SceneObject(_SceneModel):
    id: str
    label: str = ""
    category: str = ""
    location: str = ""
    # Open enum: the analyzer sometimes answers outside the three classes.
    prominence: Prominence | str = Prominence.FOREGROUND
    visual_attributes: VisualAttributes = Field(default_factory=VisualAttributes)
    micro_details: list[str] = Field(default_factory=list)
    pose_or_orientation: str = ""
    text_content: str | None = None


class TextOCRContent(_SceneModel):
    text: str = ""
    location: str = ""
    font_style: str = ""
    legibility: str = ""


class TextOCR(_SceneModel):
    present: bool = False
    content: list[TextOCRContent] = Field(default_factory=list)


class SceneDocument(_SceneModel):
    """Structured scene understanding produced by analysis and edited by the user.

    The document owns its object list. Edits mutate it in place; a new upload
    replaces it entirely.
    """

    meta: ImageMeta = Field(default_factory=ImageMeta)
    global_context: GlobalContext = Field(default_factory=GlobalContext)
    color_palette: ColorPalette = Field(default_factory=ColorPalette)
    composition: Composition = Field(default_factory=Composition)
    objects: list[SceneObject] = Field(default_factory=list)
    text_ocr: TextOCR = Field(default_factory=TextOCR)
    semantic_relationships: list[str] = Field(default_factory=list)

    def snapshot(self) -> SceneDocument:
        """Deep copy that later in-place edits cannot reach."""
        return self.model_copy(deep=True)
