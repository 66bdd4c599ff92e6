from __future__ import annotations

from pathlib import Path

from config import DEFAULT_SPEECH_TIMEOUT_S, JsonConfigStore
from models import ROOMS


def test_config_read_write(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    store = JsonConfigStore(path=path)

    assert store.get_api_key() == ""
    assert store.get_rooms() == list(ROOMS)
    assert store.get_camera_index() == 0
    assert store.get_speech_timeout_s() == DEFAULT_SPEECH_TIMEOUT_S

    store.set_api_key("abc")
    store.set_rooms(["Porch", "  ", "Laundry "])
    store.set_camera_index(2)

    reloaded = JsonConfigStore(path=path)
    assert reloaded.get_api_key() == "abc"
    assert reloaded.get_rooms() == ["Porch", "Laundry"]
    assert reloaded.get_camera_index() == 2


def test_config_invalid_json_fallback(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{invalid", encoding="utf-8")

    store = JsonConfigStore(path=path)
    assert store.get_api_key() == ""
    assert store.get_rooms() == list(ROOMS)


def test_config_bad_values_fall_back(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(
        '{"rooms": "Kitchen", "camera_index": "front", "speech_timeout_s": -1}',
        encoding="utf-8",
    )

    store = JsonConfigStore(path=path)
    assert store.get_rooms() == list(ROOMS)
    assert store.get_camera_index() == 0
    assert store.get_speech_timeout_s() == DEFAULT_SPEECH_TIMEOUT_S
