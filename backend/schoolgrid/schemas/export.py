from datetime import datetime

from pydantic import BaseModel

from schoolgrid.core.calendar import DayToken


class ExportFilter(BaseModel):
    day: DayToken | None = None
    teacher_id: str | None = None
    grade_id: str | None = None
    section_id: str | None = None
    room_id: str | None = None


class FlatScheduleEntry(BaseModel):
    id: str
    day: DayToken
    day_label: str
    period_number: int
    period_time: str
    teacher_name: str
    teacher_subject: str
    grade_name: str
    section_name: str
    room_name: str
    subject: str


class JsonExport(BaseModel):
    data: list[FlatScheduleEntry]
    count: int
    exported_at: datetime


class WeeklyExport(BaseModel):
    schedule: dict[str, list[FlatScheduleEntry]]
    exported_at: datetime
