"""Simple JSON-based preferences store.

Only application preferences live here; inspection records are never written
to disk.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from models import ROOMS

logger = logging.getLogger(__name__)

DEFAULT_SPEECH_TIMEOUT_S = 10.0


class JsonConfigStore:
    def __init__(self, path: Path | None = None) -> None:
        self._path = path or Path.home() / ".config" / "house_inspector" / "config.json"
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def get_api_key(self) -> str:
        data = self._read_all()
        return str(data.get("api_key", ""))

    def set_api_key(self, key: str) -> None:
        self._update("api_key", key)

    def get_rooms(self) -> list[str]:
        rooms = self._read_all().get("rooms")
        if not isinstance(rooms, list):
            return list(ROOMS)
        cleaned = [str(room).strip() for room in rooms if str(room).strip()]
        return cleaned or list(ROOMS)

    def set_rooms(self, rooms: list[str]) -> None:
        self._update("rooms", [room.strip() for room in rooms if room.strip()])

    def get_camera_index(self) -> int:
        try:
            return max(0, int(self._read_all().get("camera_index", 0)))
        except (TypeError, ValueError):
            return 0

    def set_camera_index(self, index: int) -> None:
        self._update("camera_index", int(index))

    def get_speech_timeout_s(self) -> float:
        try:
            value = float(self._read_all().get("speech_timeout_s", DEFAULT_SPEECH_TIMEOUT_S))
        except (TypeError, ValueError):
            return DEFAULT_SPEECH_TIMEOUT_S
        return value if value > 0 else DEFAULT_SPEECH_TIMEOUT_S

    def _update(self, key: str, value: object) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def _read_all(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Ignoring unreadable config %s: %s", self._path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict) -> None:
        self._path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
