"""Speech capability backed by the microphone and DashScope qwen3-asr-flash.

The model transcribes a complete utterance, so audio is buffered while the
inspector is dictating and sent when ``stop()`` is called. Recognised text is
streamed back as partial events followed by one final event, all delivered
before ``stop()`` returns (bounded by ``finalize_timeout_s``).
"""

from __future__ import annotations

import base64
import io
import logging
import os
import threading
import wave
from queue import Empty, Queue
from typing import Callable, Optional

from errors import AUTH_FAILED, NETWORK_ERROR, SPEECH_ERROR, CapabilityUnavailableError
from microphone import AudioChunk, MicrophoneRecorder
from models import SpeechEvent, SpeechEventKind

logger = logging.getLogger(__name__)

try:
    import dashscope
except Exception:  # pragma: no cover
    dashscope = None  # type: ignore

SpeechEventCallback = Callable[[SpeechEvent], None]


def pcm_to_wav_base64(pcm: bytes, sample_rate: int = 16000, channels: int = 1) -> str:
    """Wrap raw 16-bit PCM in a WAV container and base64-encode it."""
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(2)
        wf.setframerate(sample_rate)
        wf.writeframes(pcm)
    return base64.b64encode(buf.getvalue()).decode("ascii")


class DashscopeSpeechCapability:
    def __init__(
        self,
        api_key: str = "",
        recorder: Optional[MicrophoneRecorder] = None,
        model: str = "qwen3-asr-flash",
        request_timeout_s: float = 10.0,
        finalize_timeout_s: float = 15.0,
        queue_maxsize: int = 600,
    ) -> None:
        self._api_key = api_key
        self._recorder = recorder or MicrophoneRecorder()
        self._model = model
        self._request_timeout_s = request_timeout_s
        self._finalize_timeout_s = finalize_timeout_s
        self._queue_maxsize = queue_maxsize
        self._thread: Optional[threading.Thread] = None
        self._cancel = threading.Event()

    @property
    def api_key(self) -> str:
        return self._api_key or os.getenv("DASHSCOPE_API_KEY", "")

    def set_api_key(self, api_key: str) -> None:
        self._api_key = api_key

    def initialize(self) -> bool:
        if dashscope is None:
            logger.info("dashscope is not installed; dictation disabled")
            return False
        if not self.api_key:
            logger.info("No DashScope API key configured; dictation disabled")
            return False
        return self._recorder.has_input_device()

    def listen(self, on_event: SpeechEventCallback) -> None:
        if self._thread is not None and self._thread.is_alive():
            raise RuntimeError("dictation already in progress")
        chunk_queue: Queue[AudioChunk | None] = Queue(maxsize=self._queue_maxsize)
        self._cancel = threading.Event()
        try:
            self._recorder.start(chunk_queue)
        except Exception as exc:
            raise CapabilityUnavailableError(f"microphone could not start: {exc}") from exc
        self._thread = threading.Thread(
            target=self._worker,
            args=(chunk_queue, on_event, self._cancel),
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        self._recorder.stop()
        thread = self._thread
        if thread is None:
            return
        thread.join(timeout=self._finalize_timeout_s)
        if thread.is_alive():
            logger.warning("Transcription did not finish in %.1fs; discarding", self._finalize_timeout_s)
            self._cancel.set()
        self._thread = None

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _worker(
        self,
        chunk_queue: Queue[AudioChunk | None],
        on_event: SpeechEventCallback,
        cancel: threading.Event,
    ) -> None:
        pcm = bytearray()
        sample_rate = self._recorder.sample_rate
        channels = self._recorder.channels
        while not cancel.is_set():
            try:
                chunk = chunk_queue.get(timeout=0.2)
            except Empty:
                continue
            if chunk is None:
                break
            pcm.extend(chunk.pcm16_bytes)
            sample_rate = chunk.sample_rate
            channels = chunk.channels

        if cancel.is_set() or not pcm:
            return
        self._transcribe(pcm_to_wav_base64(bytes(pcm), sample_rate, channels), on_event, cancel)

    def _transcribe(self, wav_base64: str, on_event: SpeechEventCallback, cancel: threading.Event) -> None:
        if dashscope is None:
            on_event(SpeechEvent(kind=SpeechEventKind.ERROR.value, code=SPEECH_ERROR, message="dashscope is not installed"))
            return
        try:
            response = dashscope.MultiModalConversation.call(
                api_key=self.api_key,
                model=self._model,
                messages=[
                    {"role": "system", "content": [{"text": ""}]},
                    {"role": "user", "content": [{"audio": wav_base64}]},
                ],
                result_format="message",
                asr_options={"enable_itn": True},
                stream=True,
                timeout=self._request_timeout_s,
            )
            latest = ""
            for chunk in response:
                if cancel.is_set():
                    return
                text = extract_text(chunk)
                if text:
                    latest = text
                    on_event(SpeechEvent(kind=SpeechEventKind.PARTIAL.value, text=text))
        except Exception as exc:
            on_event(to_error_event(exc))
            return

        if latest and not cancel.is_set():
            on_event(SpeechEvent(kind=SpeechEventKind.FINAL.value, text=latest))


def extract_text(chunk: object) -> str:
    """Pull the recognised text out of a streaming response chunk."""
    if not isinstance(chunk, dict):
        return ""
    choices = chunk.get("output", {}).get("choices", [])
    if not choices:
        return ""
    content = choices[0].get("message", {}).get("content", [])
    if content and isinstance(content[0], dict):
        return str(content[0].get("text", ""))
    return ""


def to_error_event(exc: Exception) -> SpeechEvent:
    message = str(exc)
    low = message.lower()
    if "401" in low or "auth" in low or "api key" in low:
        code = AUTH_FAILED
    elif "timeout" in low or "network" in low or "connection" in low:
        code = NETWORK_ERROR
    else:
        code = SPEECH_ERROR
    return SpeechEvent(kind=SpeechEventKind.ERROR.value, code=code, message=message)
