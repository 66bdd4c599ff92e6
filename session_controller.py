"""State-machine based capture session orchestration."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, Optional, Sequence

from errors import (
    CAMERA_UNAVAILABLE,
    CAPTURE_FAILED,
    ERROR_MESSAGES,
    PERMISSION_DENIED,
    RECORD_ADDED,
    SPEECH_ERROR,
    SPEECH_UNAVAILABLE,
    EmptyDraftError,
)
from interfaces import CameraCapability, PermissionCapability, RecordSource, SpeechCapability
from models import (
    ROOMS,
    CameraState,
    DraftObservation,
    InspectionRecord,
    SpeechEvent,
    SpeechEventKind,
    SpeechState,
)
from record_store import RecordStore

logger = logging.getLogger(__name__)

CameraStateCallback = Callable[[CameraState, CameraState], None]
SpeechStateCallback = Callable[[SpeechState, SpeechState], None]
DraftCallback = Callable[[DraftObservation], None]
NoticeCallback = Callable[[str, str], None]

CAMERA_PERMISSION = "camera"
MICROPHONE_PERMISSION = "microphone"


class CaptureSessionController:
    def __init__(
        self,
        camera: CameraCapability,
        speech: SpeechCapability,
        permissions: Optional[PermissionCapability] = None,
        store: Optional[RecordStore] = None,
        rooms: Sequence[str] = ROOMS,
        clock: Callable[[], datetime] = datetime.now,
        on_camera_state: Optional[CameraStateCallback] = None,
        on_speech_state: Optional[SpeechStateCallback] = None,
        on_draft_change: Optional[DraftCallback] = None,
        on_notice: Optional[NoticeCallback] = None,
    ) -> None:
        self._camera = camera
        self._speech = speech
        self._permissions = permissions
        self._store = store if store is not None else RecordStore()
        self._rooms = list(rooms) or list(ROOMS)
        self._clock = clock
        self._on_camera_state = on_camera_state
        self._on_speech_state = on_speech_state
        self._on_draft_change = on_draft_change
        self._on_notice = on_notice

        self._lock = threading.RLock()
        self._camera_state = CameraState.IDLE
        self._speech_state = SpeechState.UNAVAILABLE
        self._camera_acquired = False
        self._capture_in_flight = False
        self._session_id = 0
        self._dictation_id = 0
        self._stopping_dictation = False
        self._draft = DraftObservation(selected_room=self._rooms[0])

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def camera_state(self) -> CameraState:
        return self._camera_state

    @property
    def speech_state(self) -> SpeechState:
        return self._speech_state

    @property
    def draft(self) -> DraftObservation:
        with self._lock:
            return self._draft.copy()

    @property
    def rooms(self) -> list[str]:
        return list(self._rooms)

    @property
    def store(self) -> RecordSource:
        return self._store

    @property
    def can_commit(self) -> bool:
        return self._draft.can_commit

    @property
    def camera_available(self) -> bool:
        return self._camera_state in (CameraState.CAMERA_READY, CameraState.CAPTURING)

    @property
    def speech_available(self) -> bool:
        return self._speech_state != SpeechState.UNAVAILABLE

    @property
    def is_listening(self) -> bool:
        return self._speech_state == SpeechState.LISTENING

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def __enter__(self) -> CaptureSessionController:
        self.start_session()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.end_session()

    def start_session(self) -> None:
        with self._lock:
            if self._camera_state != CameraState.IDLE:
                return
            self._session_id += 1
            self._draft = DraftObservation(selected_room=self._rooms[0])
            self._init_camera()
            self._init_speech()
            self._emit_draft()

    def end_session(self) -> None:
        with self._lock:
            self._session_id += 1
            was_listening = self._speech_state == SpeechState.LISTENING
            release_camera = self._camera_acquired
            self._camera_acquired = False
            self._dictation_id += 1
            self._stopping_dictation = False
            self._transition_speech(SpeechState.UNAVAILABLE)
            self._transition_camera(CameraState.IDLE)
            self._draft = DraftObservation(selected_room=self._rooms[0])
        if was_listening:
            self._safe_stop_speech()
        if release_camera:
            self._safe_release_camera()

    def _init_camera(self) -> None:
        self._transition_camera(CameraState.CAMERA_INITIALIZING)
        if not self._request_permission(CAMERA_PERMISSION):
            self._transition_camera(CameraState.CAMERA_UNAVAILABLE)
            self._emit_notice(PERMISSION_DENIED, ERROR_MESSAGES[PERMISSION_DENIED])
            return
        try:
            ready = self._camera.initialize()
        except Exception as exc:
            logger.warning("Camera initialisation failed: %s", exc)
            ready = False
        if not ready:
            self._transition_camera(CameraState.CAMERA_UNAVAILABLE)
            self._emit_notice(CAMERA_UNAVAILABLE, ERROR_MESSAGES[CAMERA_UNAVAILABLE])
            return
        self._camera_acquired = True
        self._transition_camera(CameraState.CAMERA_READY)

    def _init_speech(self) -> None:
        self._dictation_id += 1
        self._stopping_dictation = False
        if not self._request_permission(MICROPHONE_PERMISSION):
            self._transition_speech(SpeechState.UNAVAILABLE)
            self._emit_notice(PERMISSION_DENIED, ERROR_MESSAGES[PERMISSION_DENIED])
            return
        try:
            available = self._speech.initialize()
        except Exception as exc:
            logger.warning("Speech initialisation failed: %s", exc)
            available = False
        if not available:
            self._transition_speech(SpeechState.UNAVAILABLE)
            self._emit_notice(SPEECH_UNAVAILABLE, ERROR_MESSAGES[SPEECH_UNAVAILABLE])
            return
        self._transition_speech(SpeechState.IDLE)

    def _request_permission(self, kind: str) -> bool:
        if self._permissions is None:
            return True
        try:
            return bool(self._permissions.request(kind))
        except Exception as exc:
            logger.warning("Permission request for %s failed: %s", kind, exc)
            return False

    # ------------------------------------------------------------------
    # Draft operations
    # ------------------------------------------------------------------

    def select_room(self, room: str) -> None:
        with self._lock:
            self._draft.selected_room = room
            self._emit_draft()

    def edit_comment(self, text: str) -> None:
        with self._lock:
            self._draft.pending_comment = text
            self._emit_draft()

    def capture_photo(self) -> bool:
        """Take one photo into the draft.

        Rejected unless the camera is ready and no earlier device call is still
        running, including one left over from a previous session. Capture
        failures are reported as a notice and leave the draft untouched.
        """
        with self._lock:
            if self._camera_state != CameraState.CAMERA_READY or self._capture_in_flight:
                logger.debug("capture_photo ignored in state %s", self._camera_state.value)
                return False
            session_id = self._session_id
            self._capture_in_flight = True
            self._transition_camera(CameraState.CAPTURING)

        image: Optional[bytes] = None
        try:
            image = self._camera.capture()
        except Exception as exc:
            logger.warning("Photo capture failed: %s", exc)
        finally:
            with self._lock:
                self._capture_in_flight = False
                current = session_id == self._session_id
                if current:
                    self._transition_camera(CameraState.CAMERA_READY)

        with self._lock:
            if not current:
                return False
            if not image:
                self._emit_notice(CAPTURE_FAILED, ERROR_MESSAGES[CAPTURE_FAILED])
                return False
            self._draft.pending_image = image
            self._emit_draft()
            return True

    def start_dictation(self) -> bool:
        with self._lock:
            if self._speech_state == SpeechState.UNAVAILABLE:
                self._emit_notice(SPEECH_UNAVAILABLE, ERROR_MESSAGES[SPEECH_UNAVAILABLE])
                return False
            if self._speech_state != SpeechState.IDLE:
                return False
            self._dictation_id += 1
            self._stopping_dictation = False
            dictation_id = self._dictation_id
            self._transition_speech(SpeechState.LISTENING)
            try:
                self._speech.listen(lambda event: self._handle_speech_event(dictation_id, event))
            except Exception as exc:
                logger.warning("Starting dictation failed: %s", exc)
                self._dictation_id += 1
                self._transition_speech(SpeechState.IDLE)
                self._emit_notice(SPEECH_ERROR, f"{ERROR_MESSAGES[SPEECH_ERROR]} {exc}")
                return False
            return True

    def stop_dictation(self) -> None:
        with self._lock:
            if self._speech_state != SpeechState.LISTENING or self._stopping_dictation:
                return
            self._stopping_dictation = True
            dictation_id = self._dictation_id

        self._safe_stop_speech()

        with self._lock:
            if dictation_id != self._dictation_id:
                return
            self._stopping_dictation = False
            self._dictation_id += 1
            self._transition_speech(SpeechState.IDLE)

    def commit(self) -> InspectionRecord:
        with self._lock:
            if not self._draft.can_commit:
                raise EmptyDraftError("nothing to add: take a photo or write a comment")
            record = InspectionRecord(
                room=self._draft.selected_room,
                image=self._draft.pending_image,
                comment=self._draft.pending_comment,
                timestamp=self._clock(),
            )
            self._store.append(record)
            self._draft.clear()
            self._emit_draft()
            self._emit_notice(RECORD_ADDED, ERROR_MESSAGES[RECORD_ADDED].format(room=record.room))
            return record

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _handle_speech_event(self, dictation_id: int, event: SpeechEvent) -> None:
        with self._lock:
            if dictation_id != self._dictation_id or self._speech_state != SpeechState.LISTENING:
                return
            kind = event.kind
            if kind in (SpeechEventKind.PARTIAL.value, SpeechEventKind.FINAL.value):
                self._draft.pending_comment = event.text
                self._emit_draft()
                if kind == SpeechEventKind.FINAL.value:
                    self._finish_dictation()
                return
            if kind == SpeechEventKind.ERROR.value:
                logger.warning("Speech error %s: %s", event.code, event.message)
                self._finish_dictation()
                self._emit_notice(event.code or SPEECH_ERROR, event.message or ERROR_MESSAGES[SPEECH_ERROR])

    def _finish_dictation(self) -> None:
        self._dictation_id += 1
        self._stopping_dictation = False
        self._transition_speech(SpeechState.IDLE)

    def _emit_draft(self) -> None:
        self._notify(self._on_draft_change, self._draft.copy())

    def _emit_notice(self, code: str, message: str) -> None:
        self._notify(self._on_notice, code, message)

    def _safe_stop_speech(self) -> None:
        try:
            self._speech.stop()
        except Exception as exc:
            logger.warning("Stopping speech failed: %s", exc)

    def _safe_release_camera(self) -> None:
        try:
            self._camera.release()
        except Exception as exc:
            logger.warning("Releasing camera failed: %s", exc)

    def _transition_camera(self, to_state: CameraState) -> None:
        from_state = self._camera_state
        if from_state == to_state:
            return
        self._camera_state = to_state
        logger.debug("Camera %s -> %s", from_state.value, to_state.value)
        self._notify(self._on_camera_state, from_state, to_state)

    def _transition_speech(self, to_state: SpeechState) -> None:
        from_state = self._speech_state
        if from_state == to_state:
            return
        self._speech_state = to_state
        logger.debug("Speech %s -> %s", from_state.value, to_state.value)
        self._notify(self._on_speech_state, from_state, to_state)

    def _notify(self, callback: Optional[Callable[..., None]], *args: object) -> None:
        # observers never get to abort a state change that already happened
        if callback is None:
            return
        try:
            callback(*args)
        except Exception:
            logger.exception("Observer %r failed", callback)
