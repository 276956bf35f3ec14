from src.domain.entities.scene import SceneObject
from src.domain.services.diff_service import ObjectMatching, SceneDiffService as DS


def test_unchanged_scene_has_no_diff(scene):
    assert DS.diff(scene.snapshot(), scene) == frozenset()


def test_time_of_day_change(scene):
    edited = scene.snapshot()
    edited.global_context.time_of_day = "Night"
    assert DS.diff(edited, scene) == {"time_of_day"}


def test_lighting_and_composition_fields(scene):
    edited = scene.snapshot()
    edited.global_context.lighting.color_temp = "Cool"
    edited.composition.framing = "Close-up"
    assert DS.diff(edited, scene) == {"color_temp", "framing"}


def test_object_attribute_change(scene):
    edited = scene.snapshot()
    edited.objects[0].visual_attributes.state = "Cleared"
    assert DS.diff(edited, scene) == {"object_obj_table_state"}


def test_palette_change_by_index(scene):
    edited = scene.snapshot()
    edited.color_palette.dominant_hex_estimates[1] = "#000000"
    assert DS.diff(edited, scene) == {"color_1"}


def test_palette_length_mismatch_compares_common_prefix(scene):
    edited = scene.snapshot()
    edited.color_palette.dominant_hex_estimates.append("#123456")
    assert DS.diff(edited, scene) == frozenset()

    shorter = scene.snapshot()
    shorter.color_palette.dominant_hex_estimates = ["#F2C14E"]
    assert DS.diff(shorter, scene) == frozenset()


def test_added_object_is_not_diffed(scene):
    edited = scene.snapshot()
    edited.objects.append(SceneObject(id="obj_new", label="Chair"))
    assert DS.diff(edited, scene) == frozenset()
    assert DS.diff(edited, scene, ObjectMatching.POSITION) == frozenset()


def test_reorder_matches_by_id(scene):
    edited = scene.snapshot()
    edited.objects.reverse()
    assert DS.diff(edited, scene) == frozenset()


def test_reorder_is_spurious_in_position_mode(scene):
    edited = scene.snapshot()
    edited.objects.reverse()
    changed = DS.diff(edited, scene, ObjectMatching.POSITION)
    assert "object_obj_awning_label" in changed
    assert "object_obj_table_label" in changed


def test_diff_is_deterministic_and_pure(scene):
    a = scene.snapshot()
    b = scene.snapshot()
    for doc in (a, b):
        doc.global_context.weather_atmosphere = "Foggy"
        doc.objects[1].prominence = "Background"
    before = a.model_dump()
    assert DS.diff(a, scene) == DS.diff(b, scene) == {"weather_atmosphere", "object_obj_awning_prominence"}
    assert a.model_dump() == before


def test_prominence_enum_and_string_compare_equal(scene):
    from src.domain.entities.scene import Prominence

    edited = scene.snapshot()
    edited.objects[0].prominence = Prominence.FOREGROUND
    assert DS.diff(edited, scene) == frozenset()
