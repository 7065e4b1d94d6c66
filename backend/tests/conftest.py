import os

# Keep the module-level engine off the on-disk default before schoolgrid is imported.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from types import SimpleNamespace  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from schoolgrid.api.deps import get_db  # noqa: E402
from schoolgrid.core.calendar import DAY_TOKENS, DayToken  # noqa: E402
from schoolgrid.db.base import Base  # noqa: E402
from schoolgrid.db.session import build_engine  # noqa: E402
from schoolgrid.main import app  # noqa: E402
from schoolgrid.models import Grade, Period, Room, ScheduleEntry, Section, Teacher  # noqa: E402
from schoolgrid.services.rate_limit import clear_rate_limiter  # noqa: E402


@pytest.fixture()
def engine():
    # One shared in-memory connection with foreign keys enforced.
    test_engine = build_engine("sqlite+pysqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    clear_rate_limiter()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    clear_rate_limiter()


@pytest.fixture()
def grid(db_session):
    """Seed a small school: one grade with two sections, two teachers, two rooms, two periods."""
    grade = Grade(name="Grade 7", order=7)
    other_grade = Grade(name="Grade 8", order=8)
    section_x = Section(name="A", grade=grade)
    section_y = Section(name="B", grade=grade)
    other_section = Section(name="A", grade=other_grade)
    t1 = Teacher(name="Amal Haddad", subject="Math", weekly_periods=4, work_days=frozenset(DAY_TOKENS))
    t2 = Teacher(name="Omar Saleh", subject="Science", weekly_periods=20, work_days=frozenset(DAY_TOKENS))
    room_a = Room(name="Room A", capacity=30)
    room_b = Room(name="Room B", capacity=25)
    p1 = Period(number=1, start_time="08:00", end_time="08:45")
    p2 = Period(number=2, start_time="08:50", end_time="09:35")
    db_session.add_all([grade, other_grade, section_x, section_y, other_section, t1, t2, room_a, room_b, p1, p2])
    db_session.commit()
    return SimpleNamespace(
        grade=grade,
        other_grade=other_grade,
        section_x=section_x,
        section_y=section_y,
        other_section=other_section,
        t1=t1,
        t2=t2,
        room_a=room_a,
        room_b=room_b,
        p1=p1,
        p2=p2,
    )


@pytest.fixture()
def book(db_session, grid):
    """Insert a committed entry directly, bypassing the booking checks."""

    def _book(*, teacher=None, section=None, room=None, period=None, day=DayToken.sunday, subject="Math"):
        section = section or grid.section_x
        entry = ScheduleEntry(
            teacher_id=(teacher or grid.t1).id,
            grade_id=section.grade_id,
            section_id=section.id,
            room_id=(room or grid.room_a).id,
            period_id=(period or grid.p1).id,
            day=day,
            subject=subject,
        )
        db_session.add(entry)
        db_session.commit()
        return entry

    return _book


def entry_payload(grid, **overrides) -> dict:
    payload = {
        "teacher_id": grid.t1.id,
        "grade_id": grid.grade.id,
        "section_id": grid.section_x.id,
        "period_id": grid.p1.id,
        "room_id": grid.room_a.id,
        "day": "sunday",
        "subject": "Math",
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def make_payload(grid):
    return lambda **overrides: entry_payload(grid, **overrides)
