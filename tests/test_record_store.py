from __future__ import annotations

from datetime import datetime

import pytest

from errors import InvalidRecordError
from models import InspectionRecord
from record_store import RecordStore


def _record(room: str, comment: str = "", image: bytes | None = None) -> InspectionRecord:
    return InspectionRecord(room=room, image=image, comment=comment, timestamp=datetime(2024, 5, 1, 10, 0, 0))


def test_all_returns_records_in_append_order() -> None:
    store = RecordStore()
    records = [_record("Kitchen", "a"), _record("Garage", image=b"x"), _record("Kitchen", "b")]
    for record in records:
        store.append(record)

    assert store.all() == tuple(records)
    assert len(store) == 3


def test_empty_record_is_rejected() -> None:
    store = RecordStore()
    store.append(_record("Kitchen", "ok"))

    with pytest.raises(InvalidRecordError):
        store.append(_record("Kitchen"))
    with pytest.raises(InvalidRecordError):
        store.append(_record("Kitchen", image=b""))

    assert len(store) == 1


def test_snapshot_is_not_affected_by_later_appends() -> None:
    store = RecordStore()
    store.append(_record("Kitchen", "first"))
    snapshot = store.all()
    store.append(_record("Attic", "second"))

    assert len(snapshot) == 1
    assert len(store.all()) == 2


def test_duplicates_are_kept() -> None:
    store = RecordStore()
    record = _record("Bedroom", "same")
    store.append(record)
    store.append(record)
    assert store.all() == (record, record)


def test_group_by_room_orders_by_first_occurrence() -> None:
    store = RecordStore()
    leak = _record("Kitchen", "leak under sink")
    bath = _record("Bathroom", image=b"X")
    tile = _record("Kitchen", "chipped tile")
    for record in (leak, bath, tile):
        store.append(record)

    grouped = store.group_by_room()

    assert list(grouped) == ["Kitchen", "Bathroom"]
    assert grouped["Kitchen"] == [leak, tile]
    assert grouped["Bathroom"] == [bath]


def test_group_by_room_is_recomputed_each_call() -> None:
    store = RecordStore()
    store.append(_record("Kitchen", "a"))
    first = store.group_by_room()
    store.append(_record("Basement", "b"))

    assert list(first) == ["Kitchen"]
    assert list(store.group_by_room()) == ["Kitchen", "Basement"]


def test_empty_store_groups_to_empty_mapping() -> None:
    assert RecordStore().group_by_room() == {}


def test_listeners_see_successful_appends_only() -> None:
    store = RecordStore()
    seen: list[InspectionRecord] = []
    store.add_listener(seen.append)

    record = _record("Garage", "oil stain")
    store.append(record)
    with pytest.raises(InvalidRecordError):
        store.append(_record("Garage"))
    store.remove_listener(seen.append)
    store.append(_record("Garage", "after removal"))

    assert seen == [record]


def test_failing_listener_does_not_undo_append_or_skip_others() -> None:
    store = RecordStore()
    seen: list[InspectionRecord] = []

    def broken(record: InspectionRecord) -> None:
        raise RuntimeError("listener exploded")

    store.add_listener(broken)
    store.add_listener(seen.append)
    record = _record("Attic", "wasp nest")

    store.append(record)

    assert store.all() == (record,)
    assert seen == [record]
