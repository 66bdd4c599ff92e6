"""Shared error codes, user-facing messages and exceptions."""

from __future__ import annotations

CAPTURE_FAILED = "CAPTURE_FAILED"
CAMERA_UNAVAILABLE = "CAMERA_UNAVAILABLE"
SPEECH_UNAVAILABLE = "SPEECH_UNAVAILABLE"
PERMISSION_DENIED = "PERMISSION_DENIED"
SPEECH_ERROR = "SPEECH_ERROR"
NETWORK_ERROR = "NETWORK_ERROR"
AUTH_FAILED = "AUTH_FAILED"
RECORD_ADDED = "RECORD_ADDED"

ERROR_MESSAGES = {
    CAPTURE_FAILED: "Could not take the photo, please retry.",
    CAMERA_UNAVAILABLE: "Camera not available.",
    SPEECH_UNAVAILABLE: "Speech not available.",
    PERMISSION_DENIED: "Permission is required in system settings.",
    SPEECH_ERROR: "Speech recognition failed.",
    NETWORK_ERROR: "Network failed, please retry.",
    AUTH_FAILED: "API key is invalid.",
    RECORD_ADDED: "Added to {room} report",
}


class InspectorError(Exception):
    """Base class for errors raised by the inspector core."""


class CaptureError(InspectorError):
    """A single photo attempt failed; the user may retry."""


class CapabilityUnavailableError(InspectorError):
    """Camera or speech never became usable for this session."""


class InvalidRecordError(InspectorError):
    """A record with neither photo nor comment was rejected."""


class EmptyDraftError(InvalidRecordError):
    """Commit was requested while the draft has no photo and no comment."""
