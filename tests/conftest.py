import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure project root is on sys.path so 'src' is importable during tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("GENAI_DISABLED", "1")


def build_scene():
    from src.domain.entities.scene import (
        ColorPalette,
        Composition,
        GlobalContext,
        Lighting,
        SceneDocument,
        SceneObject,
        VisualAttributes,
    )

    return SceneDocument(
        global_context=GlobalContext(
            scene_description="A cafe terrace on a cobbled square",
            time_of_day="Day",
            weather_atmosphere="Clear",
            lighting=Lighting(source="Sunlight", direction="Top-down", quality="Hard", color_temp="Warm"),
        ),
        color_palette=ColorPalette(
            dominant_hex_estimates=["#F2C14E", "#2E4057", "#FFFFFF"],
            accent_colors=["#D1495B"],
            contrast_level="High",
        ),
        composition=Composition(
            camera_angle="Eye-level", framing="Wide-shot", depth_of_field="Deep", focal_point="Awning"
        ),
        objects=[
            SceneObject(
                id="obj_table",
                label="Table",
                category="Furniture",
                location="Foreground left",
                prominence="Foreground",
                visual_attributes=VisualAttributes(
                    color="White", texture="Smooth", material="Metal", state="Set", dimensions_relative="Small"
                ),
            ),
            SceneObject(
                id="obj_awning",
                label="Awning",
                category="Architecture",
                location="Top",
                prominence="Midground",
                visual_attributes=VisualAttributes(
                    color="Yellow", texture="Canvas", material="Fabric", state="Extended", dimensions_relative="Large"
                ),
            ),
        ],
        semantic_relationships=["Table sits under the awning"],
    )


@pytest.fixture()
def scene():
    return build_scene()


@pytest.fixture()
def client() -> TestClient:
    # lazy import after env configured
    from src.main import create_app

    app = create_app()
    return TestClient(app)
