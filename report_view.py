"""Read-only report projection grouped by room."""

from __future__ import annotations

from dataclasses import dataclass, field

from interfaces import RecordSource
from models import InspectionRecord

EMPTY_MESSAGE = "No inspection items yet"
EMPTY_HINT = "Go to the Inspect tab to start adding items"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class RoomSection:
    room: str
    records: tuple[InspectionRecord, ...]

    @property
    def photo_count(self) -> int:
        return sum(1 for record in self.records if record.has_image)


@dataclass(frozen=True)
class InspectionReport:
    sections: tuple[RoomSection, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.sections

    @property
    def rooms(self) -> list[str]:
        return [section.room for section in self.sections]

    @property
    def total_items(self) -> int:
        return sum(len(section.records) for section in self.sections)


def build_report(source: RecordSource) -> InspectionReport:
    """Project the store's room grouping into per-room sections.

    Room and record order are the store's. An empty store yields an empty
    report, which callers show as the "no items yet" state.
    """
    grouped = source.group_by_room()
    return InspectionReport(
        sections=tuple(RoomSection(room=room, records=tuple(items)) for room, items in grouped.items())
    )


def format_timestamp(record: InspectionRecord) -> str:
    return record.timestamp.strftime(TIMESTAMP_FORMAT)


def render_text(report: InspectionReport) -> str:
    if report.is_empty:
        return f"{EMPTY_MESSAGE}\n{EMPTY_HINT}\n"

    lines: list[str] = []
    for section in report.sections:
        lines.append(section.room)
        lines.append("=" * len(section.room))
        for record in section.records:
            if record.has_image:
                lines.append("Photo: attached")
            if record.has_comment:
                lines.append(f"Comments: {record.comment}")
            lines.append(f"Added: {format_timestamp(record)}")
            lines.append("")
    return "\n".join(lines)
