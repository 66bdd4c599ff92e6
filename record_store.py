"""In-memory, append-only store of inspection records."""

from __future__ import annotations

import logging
import threading
from typing import Callable

from errors import InvalidRecordError
from models import InspectionRecord

logger = logging.getLogger(__name__)

RecordListener = Callable[[InspectionRecord], None]


class RecordStore:
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._records: list[InspectionRecord] = []
        self._listeners: list[RecordListener] = []

    def __len__(self) -> int:
        return len(self._records)

    def append(self, record: InspectionRecord) -> None:
        if record.is_empty:
            raise InvalidRecordError("record needs a photo or a comment")
        with self._lock:
            self._records.append(record)
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(record)
            except Exception:
                logger.exception("Record listener failed")

    def all(self) -> tuple[InspectionRecord, ...]:
        with self._lock:
            return tuple(self._records)

    def group_by_room(self) -> dict[str, list[InspectionRecord]]:
        """Group records by room, keyed in first-seen order."""
        grouped: dict[str, list[InspectionRecord]] = {}
        for record in self.all():
            grouped.setdefault(record.room, []).append(record)
        return grouped

    def add_listener(self, listener: RecordListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: RecordListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)
