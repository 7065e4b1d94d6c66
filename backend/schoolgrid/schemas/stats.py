from __future__ import annotations

from pydantic import BaseModel, Field

from schoolgrid.core.calendar import DayToken
from schoolgrid.models.room import RoomType


class TeacherStats(BaseModel):
    teacher_id: str
    teacher_name: str
    subject: str
    weekly_periods: int
    scheduled_periods: int
    remaining_periods: int
    utilization_percentage: int
    periods_by_day: dict[str, int]


class RoomStats(BaseModel):
    room_id: str
    room_name: str
    room_type: RoomType
    capacity: int
    available_periods: int
    scheduled_periods: int
    remaining_periods: int
    utilization_percentage: int
    periods_by_day: dict[str, int]


class BusyPeriod(BaseModel):
    period_number: int
    count: int


class OverviewStats(BaseModel):
    total_teachers: int
    total_grades: int
    total_sections: int
    total_rooms: int
    total_periods: int
    total_schedule_entries: int
    average_teacher_utilization: int
    average_room_utilization: int
    entries_by_day: dict[str, int]
    busy_periods: list[BusyPeriod] = Field(default_factory=list)


class AvailableTeacher(BaseModel):
    id: str
    name: str
    subject: str


class AvailableRoom(BaseModel):
    id: str
    name: str
    type: RoomType


class UnusedSlot(BaseModel):
    day: DayToken
    period_number: int
    period_time: str
    available_rooms: list[AvailableRoom]
    available_teachers: list[AvailableTeacher]
