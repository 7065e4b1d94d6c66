from __future__ import annotations

from datetime import datetime, timezone

import pandas as pd
from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from schoolgrid.core.calendar import DAY_INDEX, DAY_LABELS, DAY_TOKENS
from schoolgrid.models.schedule_entry import ScheduleEntry
from schoolgrid.schemas.export import ExportFilter, FlatScheduleEntry, JsonExport, WeeklyExport

CSV_COLUMNS: dict[str, str] = {
    "day_label": "Day",
    "period_number": "Period",
    "period_time": "Time",
    "teacher_name": "Teacher",
    "subject": "Subject",
    "grade_name": "Grade",
    "section_name": "Section",
    "room_name": "Room",
}


class ExportService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_schedule_rows(self, filters: ExportFilter | None = None) -> list[FlatScheduleEntry]:
        stmt = select(ScheduleEntry).options(
            joinedload(ScheduleEntry.teacher),
            joinedload(ScheduleEntry.grade),
            joinedload(ScheduleEntry.section),
            joinedload(ScheduleEntry.period),
            joinedload(ScheduleEntry.room),
        )
        if filters is not None:
            if filters.day is not None:
                stmt = stmt.where(ScheduleEntry.day == filters.day)
            if filters.teacher_id:
                stmt = stmt.where(ScheduleEntry.teacher_id == filters.teacher_id)
            if filters.grade_id:
                stmt = stmt.where(ScheduleEntry.grade_id == filters.grade_id)
            if filters.section_id:
                stmt = stmt.where(ScheduleEntry.section_id == filters.section_id)
            if filters.room_id:
                stmt = stmt.where(ScheduleEntry.room_id == filters.room_id)

        entries = self.db.execute(stmt).unique().scalars().all()
        entries = sorted(
            entries,
            key=lambda entry: (DAY_INDEX[entry.day.value], entry.period.number, entry.grade.name, entry.section.name),
        )
        return [
            FlatScheduleEntry(
                id=entry.id,
                day=entry.day,
                day_label=DAY_LABELS[entry.day.value],
                period_number=entry.period.number,
                period_time=entry.period.time_range,
                teacher_name=entry.teacher.name,
                teacher_subject=entry.teacher.subject,
                grade_name=entry.grade.name,
                section_name=entry.section.name,
                room_name=entry.room.name,
                subject=entry.subject,
            )
            for entry in entries
        ]

    def export_json(self, filters: ExportFilter | None = None) -> JsonExport:
        rows = self.get_schedule_rows(filters)
        return JsonExport(data=rows, count=len(rows), exported_at=datetime.now(timezone.utc))

    def export_csv(self, filters: ExportFilter | None = None) -> str:
        rows = self.get_schedule_rows(filters)
        frame = pd.DataFrame([row.model_dump() for row in rows], columns=list(FlatScheduleEntry.model_fields))
        frame = frame[list(CSV_COLUMNS)].rename(columns=CSV_COLUMNS)
        # Leading BOM so spreadsheet tools detect UTF-8.
        return "\ufeff" + frame.to_csv(index=False, lineterminator="\n")

    def export_weekly(self, filters: ExportFilter | None = None) -> WeeklyExport:
        if filters is not None:
            filters = filters.model_copy(update={"day": None})
        grouped: dict[str, list[FlatScheduleEntry]] = {day.value: [] for day in DAY_TOKENS}
        for row in self.get_schedule_rows(filters):
            grouped[row.day.value].append(row)
        return WeeklyExport(schedule=grouped, exported_at=datetime.now(timezone.utc))
