import json
import os

os.environ.setdefault("ENABLE_HOT_RELOAD", "False")
os.environ.setdefault("ENABLE_LRU_CACHE", "False")

import pytest

from theme_engine.config import settings
from theme_engine.service.builder import tokens_for_preset
from theme_engine.service.compiler import compile_tokens
from theme_engine.utils.loader import PresetLibraryLoader

SAMPLE_LIBRARY = {
    "presets": [
        {
            "id": "Ocean",
            "name": "Ocean",
            "tags": ["Calm", "modern"],
            "industries": ["spa"],
            "inputs": {"brand_color": "#0ea5e9"},
        },
        {
            "id": "forest",
            "name": "Forest",
            "tags": ["calm"],
            "industries": ["retail"],
            "theme": {"primaryColor": "#166534", "borderRadius": 4},
        },
    ]
}


@pytest.fixture
def presets_file(tmp_path):
    path = tmp_path / "presets.json"
    path.write_text(json.dumps(SAMPLE_LIBRARY), encoding="utf-8")
    return path


def test_load_presets(presets_file):
    loader = PresetLibraryLoader(presets_file, watch=False)
    presets = loader.get_presets()
    assert [p.id for p in presets] == ["Ocean", "forest"]
    assert presets[0].tags == ["calm", "modern"]


def test_get_preset_is_case_insensitive(presets_file):
    loader = PresetLibraryLoader(presets_file, watch=False)
    assert loader.get_preset("ocean").name == "Ocean"
    assert loader.get_preset("missing") is None


def test_find_presets(presets_file):
    loader = PresetLibraryLoader(presets_file, watch=False)
    assert [p.id for p in loader.find_presets(tag="calm")] == ["Ocean", "forest"]
    assert [p.id for p in loader.find_presets(tag="CALM", industry="retail")] == ["forest"]
    assert loader.find_presets(industry="bakery") == []
    assert len(loader.find_presets()) == 2


def test_query_presets(presets_file):
    loader = PresetLibraryLoader(presets_file, watch=False)
    assert loader.query_presets("presets[?contains(tags, 'modern')].id") == ["Ocean"]
    assert loader.query_presets("presets[?") is None


def test_invalid_json_keeps_previous_library(presets_file):
    loader = PresetLibraryLoader(presets_file, watch=False)
    presets_file.write_text("{ not json", encoding="utf-8")
    assert loader.load_presets(force=True) is False
    assert len(loader.get_presets()) == 2


def test_schema_mismatch_is_rejected(tmp_path):
    path = tmp_path / "presets.json"
    path.write_text(json.dumps({"presets": [{"name": "no id"}]}), encoding="utf-8")
    loader = PresetLibraryLoader(path, watch=False)
    assert loader.library is None
    assert loader.get_presets() == []


def test_missing_file(tmp_path):
    loader = PresetLibraryLoader(tmp_path / "nope.json", watch=False)
    assert loader.library is None
    assert loader.load_presets() is False


def test_unchanged_file_is_not_reloaded(presets_file):
    loader = PresetLibraryLoader(presets_file, watch=False)
    library = loader.library
    assert loader.load_presets() is True
    assert loader.library is library


def test_bundled_presets_all_compile():
    loader = PresetLibraryLoader(settings.get_absolute_presets_path(), watch=False)
    presets = loader.get_presets()
    assert len(presets) >= 6
    assert loader.get_preset("indigo-modern") is not None

    for preset in presets:
        compiled = compile_tokens(tokens_for_preset(preset), preset.id)
        assert not compiled.is_empty(), preset.id
        assert "--primary" in compiled.as_dict(), preset.id

    dark = compile_tokens(tokens_for_preset(loader.get_preset("bold-barber")), "barber")
    assert dark.color_scheme == "dark"
