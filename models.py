"""Core data models for the inspector."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Optional

ROOMS: tuple[str, ...] = (
    "Kitchen",
    "Living Room",
    "Bathroom",
    "Bedroom",
    "Dining Room",
    "Garage",
    "Basement",
    "Attic",
    "Other",
)


class CameraState(str, Enum):
    IDLE = "IDLE"
    CAMERA_INITIALIZING = "CAMERA_INITIALIZING"
    CAMERA_READY = "CAMERA_READY"
    CAPTURING = "CAPTURING"
    CAMERA_UNAVAILABLE = "CAMERA_UNAVAILABLE"


class SpeechState(str, Enum):
    UNAVAILABLE = "UNAVAILABLE"
    IDLE = "IDLE"
    LISTENING = "LISTENING"


class SpeechEventKind(str, Enum):
    PARTIAL = "partial"
    FINAL = "final"
    ERROR = "error"


@dataclass
class SpeechEvent:
    kind: str
    text: str = ""
    code: str = ""
    message: str = ""


@dataclass(frozen=True)
class InspectionRecord:
    room: str
    image: Optional[bytes] = None
    comment: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def has_image(self) -> bool:
        return bool(self.image)

    @property
    def has_comment(self) -> bool:
        return bool(self.comment)

    @property
    def is_empty(self) -> bool:
        return not self.has_image and not self.has_comment


@dataclass
class DraftObservation:
    selected_room: str = ROOMS[0]
    pending_image: Optional[bytes] = None
    pending_comment: str = ""

    @property
    def can_commit(self) -> bool:
        return self.pending_image is not None or self.pending_comment != ""

    def clear(self) -> None:
        """Drop the pending photo and comment; the room selection stays."""
        self.pending_image = None
        self.pending_comment = ""

    def copy(self) -> DraftObservation:
        return replace(self)


@dataclass
class ExportResult:
    success: bool
    reason: str
