from __future__ import annotations

import math
from collections import defaultdict

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from schoolgrid.core.calendar import DAY_TOKENS, normalize_day
from schoolgrid.models.grade import Grade, Section
from schoolgrid.models.period import Period
from schoolgrid.models.room import Room
from schoolgrid.models.schedule_entry import ScheduleEntry
from schoolgrid.models.teacher import Teacher
from schoolgrid.schemas.stats import (
    AvailableRoom,
    AvailableTeacher,
    BusyPeriod,
    OverviewStats,
    RoomStats,
    TeacherStats,
    UnusedSlot,
)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def utilization_percentage(scheduled: int, capacity: int) -> int:
    if capacity <= 0:
        return 0
    return min(100, max(0, round_half_up(scheduled / capacity * 100)))


def average_percentage(values: list[int]) -> int:
    if not values:
        return 0
    return round_half_up(sum(values) / len(values))


def empty_week() -> dict[str, int]:
    return {day.value: 0 for day in DAY_TOKENS}


class StatsService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def _count(self, model) -> int:
        return self.db.scalar(select(func.count()).select_from(model)) or 0

    def _counts_by_day(self, owner_column) -> dict[str, dict[str, int]]:
        rows = self.db.execute(
            select(owner_column, ScheduleEntry.day, func.count(ScheduleEntry.id)).group_by(
                owner_column, ScheduleEntry.day
            )
        ).all()
        counts: dict[str, dict[str, int]] = defaultdict(empty_week)
        for owner_id, day, count in rows:
            counts[owner_id][normalize_day(day).value] = count
        return counts

    def get_teacher_stats(self) -> list[TeacherStats]:
        teachers = self.db.execute(select(Teacher).order_by(Teacher.name, Teacher.id)).scalars().all()
        counts = self._counts_by_day(ScheduleEntry.teacher_id)

        stats: list[TeacherStats] = []
        for teacher in teachers:
            periods_by_day = counts.get(teacher.id) or empty_week()
            scheduled = sum(periods_by_day.values())
            stats.append(
                TeacherStats(
                    teacher_id=teacher.id,
                    teacher_name=teacher.name,
                    subject=teacher.subject,
                    weekly_periods=teacher.weekly_periods,
                    scheduled_periods=scheduled,
                    remaining_periods=max(0, teacher.weekly_periods - scheduled),
                    utilization_percentage=utilization_percentage(scheduled, teacher.weekly_periods),
                    periods_by_day=periods_by_day,
                )
            )
        return stats

    def get_room_stats(self) -> list[RoomStats]:
        rooms = self.db.execute(select(Room).order_by(Room.name)).scalars().all()
        counts = self._counts_by_day(ScheduleEntry.room_id)
        # Every room shares the institution-wide week: periods x school days.
        available = self._count(Period) * len(DAY_TOKENS)

        stats: list[RoomStats] = []
        for room in rooms:
            periods_by_day = counts.get(room.id) or empty_week()
            scheduled = sum(periods_by_day.values())
            stats.append(
                RoomStats(
                    room_id=room.id,
                    room_name=room.name,
                    room_type=room.type,
                    capacity=room.capacity,
                    available_periods=available,
                    scheduled_periods=scheduled,
                    remaining_periods=max(0, available - scheduled),
                    utilization_percentage=utilization_percentage(scheduled, available),
                    periods_by_day=periods_by_day,
                )
            )
        return stats

    def get_overview_stats(self) -> OverviewStats:
        entries_by_day = empty_week()
        for day, count in self.db.execute(
            select(ScheduleEntry.day, func.count(ScheduleEntry.id)).group_by(ScheduleEntry.day)
        ).all():
            entries_by_day[normalize_day(day).value] = count

        period_rows = self.db.execute(
            select(Period.number, func.count(ScheduleEntry.id))
            .outerjoin(ScheduleEntry, ScheduleEntry.period_id == Period.id)
            .group_by(Period.id, Period.number)
            .order_by(Period.number)
        ).all()
        # Stable sort keeps ties in period-number order.
        busy_periods = sorted(
            (BusyPeriod(period_number=number, count=count) for number, count in period_rows),
            key=lambda item: item.count,
            reverse=True,
        )

        teacher_stats = self.get_teacher_stats()
        room_stats = self.get_room_stats()

        return OverviewStats(
            total_teachers=len(teacher_stats),
            total_grades=self._count(Grade),
            total_sections=self._count(Section),
            total_rooms=len(room_stats),
            total_periods=len(period_rows),
            total_schedule_entries=self._count(ScheduleEntry),
            average_teacher_utilization=average_percentage(
                [item.utilization_percentage for item in teacher_stats]
            ),
            average_room_utilization=average_percentage([item.utilization_percentage for item in room_stats]),
            entries_by_day=entries_by_day,
            busy_periods=busy_periods,
        )

    def get_unused_slots(self) -> list[UnusedSlot]:
        """List (day, period) cells with at least one free room and one free teacher.

        A teacher only counts as free on days they work. Cells where either
        side is empty are left out entirely.
        """
        periods = self.db.execute(select(Period).order_by(Period.number)).scalars().all()
        teachers = self.db.execute(select(Teacher).order_by(Teacher.name, Teacher.id)).scalars().all()
        rooms = self.db.execute(select(Room).order_by(Room.name)).scalars().all()

        busy_teachers: dict[tuple[str, str], set[str]] = defaultdict(set)
        busy_rooms: dict[tuple[str, str], set[str]] = defaultdict(set)
        for day, period_id, teacher_id, room_id in self.db.execute(
            select(ScheduleEntry.day, ScheduleEntry.period_id, ScheduleEntry.teacher_id, ScheduleEntry.room_id)
        ).all():
            cell = (normalize_day(day).value, period_id)
            busy_teachers[cell].add(teacher_id)
            busy_rooms[cell].add(room_id)

        slots: list[UnusedSlot] = []
        for day in DAY_TOKENS:
            for period in periods:
                cell = (day.value, period.id)
                free_rooms = [
                    AvailableRoom(id=room.id, name=room.name, type=room.type)
                    for room in rooms
                    if room.id not in busy_rooms[cell]
                ]
                free_teachers = [
                    AvailableTeacher(id=teacher.id, name=teacher.name, subject=teacher.subject)
                    for teacher in teachers
                    if teacher.id not in busy_teachers[cell] and teacher.works_on(day)
                ]
                if not free_rooms or not free_teachers:
                    continue
                slots.append(
                    UnusedSlot(
                        day=day,
                        period_number=period.number,
                        period_time=period.time_range,
                        available_rooms=free_rooms,
                        available_teachers=free_teachers,
                    )
                )
        return slots
