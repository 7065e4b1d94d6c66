"""Conflict detection for schedule bookings.

A booking occupies one (day, period) cell for a teacher, a room and a
section. Each of those three dimensions is probed independently against
the committed grid (plus anything flushed in the current transaction) and
the report is assembled only after all three probes have returned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from schoolgrid.core.calendar import DayToken, normalize_day
from schoolgrid.core.exceptions import ValidationError
from schoolgrid.models.grade import Grade, Section
from schoolgrid.models.period import Period
from schoolgrid.models.room import Room
from schoolgrid.models.schedule_entry import ScheduleEntry
from schoolgrid.models.teacher import Teacher
from schoolgrid.schemas.conflict import (
    ConflictCheckRequest,
    ConflictCheckResult,
    ConflictDetails,
    ConflictOut,
    ConflictType,
)
from schoolgrid.schemas.schedule import ReferenceCheckRequest, ReferenceValidationResult

logger = logging.getLogger(__name__)

DIMENSION_COLUMNS = {
    "teacher": ScheduleEntry.teacher_id,
    "room": ScheduleEntry.room_id,
    "section": ScheduleEntry.section_id,
}


@dataclass(frozen=True)
class DimensionProbe:
    dimension: ConflictType
    value: str


def require_day(value) -> DayToken:
    try:
        return normalize_day(value)
    except ValueError as exc:
        raise ValidationError(str(exc), details={"field": "day"}) from exc


def _describe_conflict(dimension: ConflictType, entry: ScheduleEntry) -> ConflictOut:
    teacher_name = entry.teacher.name
    grade_name = entry.grade.name
    section_name = entry.section.name
    room_name = entry.room.name

    if dimension == "teacher":
        message = (
            f'Teacher "{teacher_name}" already has a class at this time '
            f"({grade_name} - {section_name})"
        )
    elif dimension == "room":
        message = (
            f'Room "{room_name}" is already in use at this time '
            f"({teacher_name} - {grade_name} {section_name})"
        )
    else:
        message = (
            f'Section "{grade_name} - {section_name}" already has a class at this time '
            f"({teacher_name} in {room_name})"
        )

    return ConflictOut(
        type=dimension,
        message=message,
        conflicting_entry_id=entry.id,
        details=ConflictDetails(
            day=entry.day,
            period_number=entry.period.number,
            teacher_name=teacher_name,
            room_name=room_name,
            section_name=section_name,
            grade_name=grade_name,
        ),
    )


class ConflictService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_booking(
        self,
        dimension: ConflictType,
        value: str,
        *,
        day: DayToken,
        period_id: str,
        exclude_entry_id: str | None = None,
    ) -> ScheduleEntry | None:
        """Return the entry holding ``value`` in the (day, period) cell, if any.

        Display relations are joined into the same SELECT so the conflict
        message reflects the row that was actually found.
        """
        column = DIMENSION_COLUMNS[dimension]
        stmt = (
            select(ScheduleEntry)
            .options(
                joinedload(ScheduleEntry.teacher),
                joinedload(ScheduleEntry.grade),
                joinedload(ScheduleEntry.section),
                joinedload(ScheduleEntry.room),
                joinedload(ScheduleEntry.period),
            )
            .where(
                column == value,
                ScheduleEntry.day == day,
                ScheduleEntry.period_id == period_id,
            )
            .limit(1)
        )
        if exclude_entry_id:
            stmt = stmt.where(ScheduleEntry.id != exclude_entry_id)
        return self.db.execute(stmt).unique().scalars().first()

    def check_conflicts(self, candidate: ConflictCheckRequest) -> ConflictCheckResult:
        day = require_day(candidate.day)
        probes = (
            DimensionProbe("teacher", candidate.teacher_id),
            DimensionProbe("room", candidate.room_id),
            DimensionProbe("section", candidate.section_id),
        )

        # The probes are independent and may run in any order. All of them
        # are joined here before deciding, since a candidate can hit all three.
        # They share one Session, which is not safe to use across threads.
        hits = [
            (
                probe.dimension,
                self.find_booking(
                    probe.dimension,
                    probe.value,
                    day=day,
                    period_id=candidate.period_id,
                    exclude_entry_id=candidate.exclude_entry_id,
                ),
            )
            for probe in probes
        ]

        conflicts = [_describe_conflict(dimension, entry) for dimension, entry in hits if entry is not None]
        if conflicts:
            logger.debug(
                "Conflict check on %s period %s found %s",
                day.value,
                candidate.period_id,
                ", ".join(conflict.type for conflict in conflicts),
            )
        return ConflictCheckResult(has_conflict=bool(conflicts), conflicts=conflicts)

    def validate_references(self, ids: ReferenceCheckRequest) -> ReferenceValidationResult:
        teacher = self.db.get(Teacher, ids.teacher_id)
        grade = self.db.get(Grade, ids.grade_id)
        section = self.db.get(Section, ids.section_id)
        period = self.db.get(Period, ids.period_id)
        room = self.db.get(Room, ids.room_id)

        errors: list[str] = []
        if teacher is None:
            errors.append("Teacher not found")
        if grade is None:
            errors.append("Grade not found")
        if section is None:
            errors.append("Section not found")
        if period is None:
            errors.append("Period not found")
        if room is None:
            errors.append("Room not found")
        if section is not None and grade is not None and section.grade_id != grade.id:
            errors.append("Section does not belong to the selected grade")

        return ReferenceValidationResult(valid=not errors, errors=errors)
