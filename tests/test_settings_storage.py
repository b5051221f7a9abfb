import json
import logging

import pytest

from arena_levelgen.pipeline import PipelineError, PipelineSettings
from arena_levelgen.pipeline.settings_storage import (
    _sanitize_filename, delete_settings, dict_to_settings, list_saved_settings,
    load_settings, load_settings_from_path, save_settings
)


def test_save_and_load_preset(tmp_path):
    settings = PipelineSettings(seed=99, desired_room_count=10, spawn_enemies=False)
    path = save_settings(settings, "Big Arena!", base_dir=tmp_path)
    assert path == tmp_path / "big_arena.json"

    loaded = load_settings("Big Arena!", base_dir=tmp_path)
    assert loaded == settings
    assert list_saved_settings(tmp_path) == ["Big Arena!"]


def test_missing_preset_is_none(tmp_path):
    assert load_settings("nope", base_dir=tmp_path) is None
    assert load_settings_from_path(tmp_path / "nope.json") is None


def test_delete_preset(tmp_path):
    save_settings(PipelineSettings(), "temp", base_dir=tmp_path)
    assert delete_settings("temp", base_dir=tmp_path)
    assert not delete_settings("temp", base_dir=tmp_path)
    assert list_saved_settings(tmp_path) == []


def test_malformed_file_raises(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(PipelineError):
        load_settings_from_path(path)

    path.write_text(json.dumps({"settings": [1, 2]}), encoding="utf-8")
    with pytest.raises(PipelineError):
        load_settings_from_path(path)


def test_bare_mapping_with_unknown_keys(caplog):
    with caplog.at_level(logging.WARNING):
        settings = dict_to_settings({"seed": 5, "grid_width": 64, "colour": "red"})
    assert settings.seed == 5
    assert settings.grid_width == 64
    assert settings.grid_depth == 96
    assert "colour" in caplog.text


def test_block_feature_knobs_are_not_settings(caplog):
    knobs = {
        "parkour_step_count": 5,
        "parkour_step_height": 0.45,
        "tall_platform_height": 9.0,
        "stair_steps_per_floor": 5,
        "max_cover_per_room": 3,
    }
    with caplog.at_level(logging.WARNING):
        settings = dict_to_settings(dict(knobs, max_platform_tiers=6))
    assert settings.max_platform_tiers == 6
    assert settings == PipelineSettings(max_platform_tiers=6)
    for name in knobs:
        assert not hasattr(settings, name)
        assert name in caplog.text


def test_unreadable_presets_are_skipped(tmp_path):
    save_settings(PipelineSettings(), "good", base_dir=tmp_path)
    (tmp_path / "bad.json").write_text("][", encoding="utf-8")
    assert list_saved_settings(tmp_path) == ["good"]


def test_sanitize_filename():
    assert _sanitize_filename("My Preset #2") == "my_preset_2"
    assert _sanitize_filename("???") == "preset"
