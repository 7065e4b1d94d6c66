"""Seed a demo school for SchoolGrid.

Run:
  PYTHONPATH=backend python scripts/seed_demo_data.py

Lookup records are upserted by their natural keys. Sample bookings go
through the booking service with ``skip_conflicts`` so re-running the
script never double-books anything.
"""

from __future__ import annotations

from sqlalchemy import func, select

from schoolgrid.core.calendar import DAY_TOKENS, DayToken
from schoolgrid.core.logging import configure_logging
from schoolgrid.db.bootstrap import ensure_schema
from schoolgrid.db.session import SessionLocal
from schoolgrid.models import Grade, Period, Room, RoomType, ScheduleEntry, Section, Teacher
from schoolgrid.schemas.schedule import ScheduleEntryCreate
from schoolgrid.services.booking_service import BookingService
from schoolgrid.services.conflict_service import ConflictService

GRADES = ["Grade 1", "Grade 2", "Grade 3", "Grade 4", "Grade 5", "Grade 6"]
SECTION_NAMES = ["A", "B", "C"]

TEACHERS = [
    {"name": "Ahmad Ali", "subject": "Mathematics", "weekly_periods": 24, "notes": "Head of mathematics"},
    {"name": "Sara Omari", "subject": "Science", "weekly_periods": 20},
    {"name": "Mahmoud Saleh", "subject": "Arabic", "weekly_periods": 24},
    {
        "name": "Fatima Nasser",
        "subject": "English",
        "weekly_periods": 18,
        "work_days": [DayToken.sunday, DayToken.monday, DayToken.tuesday, DayToken.wednesday],
        "notes": "Part time",
    },
    {
        "name": "Abdullah Qahtani",
        "subject": "Religious Studies",
        "weekly_periods": 16,
        "work_days": [DayToken.sunday, DayToken.tuesday, DayToken.thursday],
    },
    {
        "name": "Noura Shammari",
        "subject": "Computing",
        "weekly_periods": 12,
        "work_days": [DayToken.monday, DayToken.wednesday, DayToken.thursday],
    },
]

ROOMS = [
    ("Room 101", 30, RoomType.regular),
    ("Room 102", 30, RoomType.regular),
    ("Room 103", 30, RoomType.regular),
    ("Room 104", 25, RoomType.regular),
    ("Room 105", 25, RoomType.regular),
    ("Science Lab", 20, RoomType.lab),
    ("Computer Lab 1", 25, RoomType.computer),
    ("Computer Lab 2", 25, RoomType.computer),
]

PERIODS = [
    (1, "07:30", "08:15"),
    (2, "08:20", "09:05"),
    (3, "09:10", "09:55"),
    (4, "10:15", "11:00"),
    (5, "11:05", "11:50"),
    (6, "11:55", "12:40"),
    (7, "12:45", "13:30"),
]

# (day, period number, teacher index, room index, subject) for Grade 1 section A.
SAMPLE_BOOKINGS = [
    (DayToken.sunday, 1, 0, 0, "Mathematics"),
    (DayToken.sunday, 2, 1, 5, "Science"),
    (DayToken.sunday, 3, 2, 0, "Arabic"),
    (DayToken.monday, 1, 3, 0, "English"),
    (DayToken.monday, 2, 5, 6, "Computing"),
]


def upsert_grades_and_sections(session) -> list[Grade]:
    grades: list[Grade] = []
    for order, name in enumerate(GRADES, start=1):
        grade = session.execute(select(Grade).where(Grade.name == name)).scalar_one_or_none()
        if grade is None:
            grade = Grade(name=name, order=order)
            session.add(grade)
        else:
            grade.order = order
        grades.append(grade)
    session.flush()

    for grade in grades:
        existing = {section.name for section in grade.sections}
        for section_name in SECTION_NAMES:
            if section_name not in existing:
                session.add(Section(name=section_name, grade_id=grade.id))
    session.flush()
    return grades


def upsert_teachers(session) -> list[Teacher]:
    teachers: list[Teacher] = []
    for profile in TEACHERS:
        teacher = session.execute(select(Teacher).where(Teacher.name == profile["name"])).scalar_one_or_none()
        if teacher is None:
            teacher = Teacher(name=profile["name"])
            session.add(teacher)
        teacher.subject = profile["subject"]
        teacher.weekly_periods = profile["weekly_periods"]
        teacher.work_days = frozenset(profile.get("work_days", DAY_TOKENS))
        teacher.notes = profile.get("notes")
        teachers.append(teacher)
    session.flush()
    return teachers


def upsert_rooms(session) -> list[Room]:
    rooms: list[Room] = []
    for name, capacity, room_type in ROOMS:
        room = session.execute(select(Room).where(Room.name == name)).scalar_one_or_none()
        if room is None:
            room = Room(name=name)
            session.add(room)
        room.capacity = capacity
        room.type = room_type
        rooms.append(room)
    session.flush()
    return rooms


def upsert_periods(session) -> dict[int, Period]:
    periods: dict[int, Period] = {}
    for number, start_time, end_time in PERIODS:
        period = session.execute(select(Period).where(Period.number == number)).scalar_one_or_none()
        if period is None:
            period = Period(number=number)
            session.add(period)
        period.start_time = start_time
        period.end_time = end_time
        periods[number] = period
    session.flush()
    return periods


def seed_bookings(session, grades, teachers, rooms, periods) -> tuple[int, int]:
    grade = grades[0]
    section = next(item for item in grade.sections if item.name == SECTION_NAMES[0])
    entries = [
        ScheduleEntryCreate(
            teacher_id=teachers[teacher_index].id,
            grade_id=grade.id,
            section_id=section.id,
            period_id=periods[period_number].id,
            room_id=rooms[room_index].id,
            day=day,
            subject=subject,
        )
        for day, period_number, teacher_index, room_index, subject in SAMPLE_BOOKINGS
    ]
    bookings = BookingService(session, ConflictService(session))
    result = bookings.bulk_create_entries(entries, skip_conflicts=True)
    return len(result.created), len(result.skipped)


def main() -> None:
    configure_logging("INFO")
    ensure_schema()
    with SessionLocal() as session:
        grades = upsert_grades_and_sections(session)
        teachers = upsert_teachers(session)
        rooms = upsert_rooms(session)
        periods = upsert_periods(session)
        session.commit()

        for grade in grades:
            session.refresh(grade)
        created, skipped = seed_bookings(session, grades, teachers, rooms, periods)

        section_count = session.execute(select(func.count(Section.id))).scalar_one()
        entry_count = session.execute(select(func.count(ScheduleEntry.id))).scalar_one()

    print("Demo school seeded successfully.")
    print("")
    print(f"Grades: {len(grades)}  Sections: {section_count}")
    print(f"Teachers: {len(teachers)}  Rooms: {len(rooms)}  Periods: {len(periods)}")
    print(f"Bookings created: {created}  already present: {skipped}  total: {entry_count}")


if __name__ == "__main__":
    main()
