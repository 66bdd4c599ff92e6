"""Protocol interfaces used by CaptureSessionController."""

from __future__ import annotations

from typing import Callable, Protocol

from models import InspectionRecord, SpeechEvent


class CameraCapability(Protocol):
    def initialize(self) -> bool: ...

    def capture(self) -> bytes: ...

    def release(self) -> None: ...


class SpeechCapability(Protocol):
    def initialize(self) -> bool: ...

    def listen(self, on_event: Callable[[SpeechEvent], None]) -> None: ...

    def stop(self) -> None: ...


class PermissionCapability(Protocol):
    def request(self, kind: str) -> bool: ...


class RecordSource(Protocol):
    def all(self) -> tuple[InspectionRecord, ...]: ...

    def group_by_room(self) -> dict[str, list[InspectionRecord]]: ...

    def __len__(self) -> int: ...


class ConfigStore(Protocol):
    def get_api_key(self) -> str: ...

    def set_api_key(self, key: str) -> None: ...

    def get_rooms(self) -> list[str]: ...

    def set_rooms(self, rooms: list[str]) -> None: ...

    def get_camera_index(self) -> int: ...

    def set_camera_index(self, index: int) -> None: ...

    def get_speech_timeout_s(self) -> float: ...
