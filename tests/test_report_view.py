from __future__ import annotations

from datetime import datetime

from models import InspectionRecord
from record_store import RecordStore
from report_view import EMPTY_MESSAGE, build_report, render_text


def _record(room: str, comment: str = "", image: bytes | None = None, minute: int = 0) -> InspectionRecord:
    return InspectionRecord(room=room, image=image, comment=comment, timestamp=datetime(2024, 5, 1, 14, minute, 5))


def test_empty_store_is_no_items_yet() -> None:
    report = build_report(RecordStore())

    assert report.is_empty is True
    assert report.sections == ()
    assert report.total_items == 0
    assert render_text(report).startswith(EMPTY_MESSAGE)


def test_sections_follow_first_seen_room_order() -> None:
    store = RecordStore()
    store.append(_record("Kitchen", "leak under sink"))
    store.append(_record("Bathroom", image=b"X"))
    store.append(_record("Kitchen", "chipped tile"))

    report = build_report(store)

    assert report.is_empty is False
    assert report.rooms == ["Kitchen", "Bathroom"]
    kitchen, bathroom = report.sections
    assert [r.comment for r in kitchen.records] == ["leak under sink", "chipped tile"]
    assert bathroom.photo_count == 1
    assert report.total_items == 3


def test_projection_does_not_change_with_store() -> None:
    store = RecordStore()
    store.append(_record("Kitchen", "a"))
    report = build_report(store)
    store.append(_record("Attic", "b"))

    assert report.rooms == ["Kitchen"]


def test_render_text_lists_photo_comment_and_timestamp() -> None:
    store = RecordStore()
    store.append(_record("Garage", "oil stain", minute=7))
    store.append(_record("Garage", image=b"jpeg", minute=9))
    report = build_report(store)

    text = render_text(report)

    assert text.splitlines()[:2] == ["Garage", "======"]
    assert "Comments: oil stain" in text
    assert "Added: 2024-05-01 14:07:05" in text
    assert text.count("Photo: attached") == 1


class _GroupedSource:
    """Record source whose grouping is the only thing the report may read."""

    def __init__(self, grouped: dict[str, list[InspectionRecord]]) -> None:
        self.grouped = grouped
        self.group_calls = 0

    def all(self) -> tuple[InspectionRecord, ...]:
        raise AssertionError("report must be built from group_by_room")

    def group_by_room(self) -> dict[str, list[InspectionRecord]]:
        self.group_calls += 1
        return self.grouped

    def __len__(self) -> int:
        return sum(len(items) for items in self.grouped.values())


def test_sections_come_from_store_grouping() -> None:
    attic = _record("Attic", "wasp nest")
    porch = _record("Porch", "loose rail")
    source = _GroupedSource({"Porch": [porch], "Attic": [attic]})

    report = build_report(source)

    assert source.group_calls == 1
    assert report.rooms == ["Porch", "Attic"]
    assert report.sections[1].records == (attic,)
