"""Microphone capture used for dictation."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from queue import Full, Queue
from typing import Any

logger = logging.getLogger(__name__)

try:
    import numpy as np
except Exception:  # pragma: no cover
    np = None  # type: ignore

try:
    import sounddevice as sd
except Exception:  # pragma: no cover
    sd = None  # type: ignore


@dataclass
class AudioChunk:
    pcm16_bytes: bytes
    sample_rate: int = 16000
    channels: int = 1
    timestamp_ms: int = 0


class MicrophoneRecorder:
    """Push 16-bit PCM chunks from the default input device onto a queue.

    ``stop()`` always puts a ``None`` sentinel on the queue so the consumer
    knows the utterance is complete.
    """

    def __init__(self, sample_rate: int = 16000, channels: int = 1, chunk_ms: int = 100) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self.chunk_ms = chunk_ms
        self.dropped_chunks = 0
        self._stream: Any = None
        self._queue: Queue[AudioChunk | None] | None = None
        self._lock = threading.Lock()

    @property
    def is_recording(self) -> bool:
        return self._stream is not None

    def has_input_device(self) -> bool:
        if sd is None or np is None:
            return False
        try:
            sd.query_devices(kind="input")
        except Exception as exc:
            logger.info("No microphone found: %s", exc)
            return False
        return True

    def start(self, chunk_queue: Queue[AudioChunk | None]) -> None:
        with self._lock:
            if self._stream is not None:
                return
            if sd is None:
                raise RuntimeError("sounddevice is not installed")
            self._queue = chunk_queue
            self.dropped_chunks = 0
            stream = sd.InputStream(
                samplerate=self.sample_rate,
                channels=self.channels,
                dtype="int16",
                blocksize=int(self.sample_rate * self.chunk_ms / 1000),
                callback=self._on_audio,
            )
            stream.start()
            self._stream = stream

    def stop(self) -> None:
        with self._lock:
            stream, self._stream = self._stream, None
            if stream is not None:
                stream.stop()
                stream.close()
            if self._queue is not None:
                try:
                    self._queue.put_nowait(None)
                except Full:
                    logger.warning("Audio queue full, end-of-audio marker dropped")
                self._queue = None

    def _on_audio(self, indata: Any, frames: int, time_info: Any, status: Any) -> None:
        chunk_queue = self._queue
        if self._stream is None or chunk_queue is None or np is None:
            return
        if status:
            logger.debug("Microphone status: %s", status)
        chunk = AudioChunk(
            pcm16_bytes=np.asarray(indata, dtype=np.int16).tobytes(),
            sample_rate=self.sample_rate,
            channels=self.channels,
            timestamp_ms=int(time.time() * 1000),
        )
        try:
            chunk_queue.put_nowait(chunk)
        except Full:
            self.dropped_chunks += 1
