import logging

import pytest
from sqlalchemy import func, select

from schoolgrid.core.calendar import DayToken
from schoolgrid.core.exceptions import (
    ConflictError,
    NotFoundError,
    ReferenceNotFoundError,
    StorageConstraintError,
    ValidationError,
)
from schoolgrid.models.schedule_entry import ScheduleEntry
from schoolgrid.schemas.conflict import ConflictCheckResult
from schoolgrid.schemas.schedule import ScheduleEntryCreate, ScheduleEntryUpdate
from schoolgrid.services.booking_service import BookingService
from schoolgrid.services.conflict_service import ConflictService


def make_service(db_session) -> BookingService:
    return BookingService(db_session, ConflictService(db_session))


def entry_count(db_session) -> int:
    return db_session.scalar(select(func.count(ScheduleEntry.id)))


def test_create_entry_persists_booking(db_session, make_payload):
    entry = make_service(db_session).create_entry(ScheduleEntryCreate(**make_payload()))

    assert entry.id
    assert entry.day == DayToken.sunday
    assert entry.teacher.name == "Amal Haddad"
    assert entry_count(db_session) == 1


def test_create_entry_in_free_period_succeeds(db_session, grid, book, make_payload):
    book(teacher=grid.t1)

    entry = make_service(db_session).create_entry(
        ScheduleEntryCreate(**make_payload(period_id=grid.p2.id, room_id=grid.room_b.id))
    )

    assert entry.period_id == grid.p2.id
    assert entry_count(db_session) == 2


def test_create_entry_rejects_conflict_with_first_message(db_session, grid, book, make_payload):
    book()

    with pytest.raises(ConflictError) as exc_info:
        make_service(db_session).create_entry(ScheduleEntryCreate(**make_payload()))

    error = exc_info.value
    assert error.status_code == 409
    assert error.message == error.conflicts[0].message
    assert [conflict["type"] for conflict in error.details["conflicts"]] == ["teacher", "room", "section"]
    assert entry_count(db_session) == 1


def test_create_entry_reports_all_reference_failures(db_session, grid, make_payload):
    payload = ScheduleEntryCreate(**make_payload(teacher_id="nope", room_id="gone"))

    with pytest.raises(ReferenceNotFoundError) as exc_info:
        make_service(db_session).create_entry(payload)

    assert exc_info.value.errors == ["Teacher not found", "Room not found"]
    assert exc_info.value.status_code == 400
    assert entry_count(db_session) == 0


def test_create_entry_rejects_invalid_day(db_session, make_payload):
    payload = ScheduleEntryCreate.model_construct(**make_payload(day="saturday"))

    with pytest.raises(ValidationError):
        make_service(db_session).create_entry(payload)


def test_storage_constraint_race_is_not_retried(db_session, grid, book, make_payload, monkeypatch):
    book()
    service = make_service(db_session)
    calls = []

    def clean_check(candidate):
        calls.append(candidate)
        return ConflictCheckResult(has_conflict=False, conflicts=[])

    monkeypatch.setattr(service.conflicts, "check_conflicts", clean_check)

    with pytest.raises(StorageConstraintError) as exc_info:
        service.create_entry(ScheduleEntryCreate(**make_payload()))

    assert exc_info.value.status_code == 409
    assert len(calls) == 1
    assert entry_count(db_session) == 1


def clean_checks(service, monkeypatch) -> list:
    calls = []

    def clean_check(candidate):
        calls.append(candidate)
        return ConflictCheckResult(has_conflict=False, conflicts=[])

    monkeypatch.setattr(service.conflicts, "check_conflicts", clean_check)
    return calls


def test_update_storage_constraint_leaves_entry_unchanged(db_session, grid, book, monkeypatch):
    book(teacher=grid.t2, room=grid.room_b, section=grid.section_y, period=grid.p2)
    entry = book()
    service = make_service(db_session)
    calls = clean_checks(service, monkeypatch)

    with pytest.raises(StorageConstraintError) as exc_info:
        service.update_entry(entry.id, ScheduleEntryUpdate(room_id=grid.room_b.id, period_id=grid.p2.id))

    assert exc_info.value.details["action"] == "update"
    assert len(calls) == 1
    db_session.refresh(entry)
    assert entry.room_id == grid.room_a.id
    assert entry.period_id == grid.p1.id


def test_bulk_storage_constraint_aborts_batch_even_when_skipping(db_session, grid, book, make_payload, monkeypatch):
    book()
    service = make_service(db_session)
    calls = clean_checks(service, monkeypatch)
    entries = [
        ScheduleEntryCreate(**make_payload(period_id=grid.p2.id)),
        ScheduleEntryCreate(**make_payload()),
    ]

    with pytest.raises(StorageConstraintError) as exc_info:
        service.bulk_create_entries(entries, skip_conflicts=True)

    assert exc_info.value.details == {"action": "bulk_create", "entries": 2}
    assert len(calls) == 2
    assert entry_count(db_session) == 1


def test_update_entry_merges_fields_and_excludes_itself(db_session, grid, book):
    entry = book()

    updated = make_service(db_session).update_entry(entry.id, ScheduleEntryUpdate(subject="Algebra"))

    assert updated.subject == "Algebra"
    assert updated.room_id == grid.room_a.id


def test_update_entry_detects_conflict_against_merged_fields(db_session, grid, book):
    book(teacher=grid.t2, room=grid.room_b, section=grid.section_y, period=grid.p2)
    entry = book()

    with pytest.raises(ConflictError) as exc_info:
        make_service(db_session).update_entry(entry.id, ScheduleEntryUpdate(room_id=grid.room_b.id, period_id=grid.p2.id))

    assert [conflict.type for conflict in exc_info.value.conflicts] == ["room"]
    db_session.refresh(entry)
    assert entry.room_id == grid.room_a.id


def test_update_entry_rejects_explicit_null(db_session, book):
    entry = book()

    with pytest.raises(ValidationError) as exc_info:
        make_service(db_session).update_entry(entry.id, ScheduleEntryUpdate(room_id=None))

    assert exc_info.value.details == {"fields": ["room_id"]}


def test_update_entry_rejects_section_outside_grade(db_session, grid, book):
    entry = book()

    with pytest.raises(ReferenceNotFoundError) as exc_info:
        make_service(db_session).update_entry(entry.id, ScheduleEntryUpdate(section_id=grid.other_section.id))

    assert exc_info.value.errors == ["Section does not belong to the selected grade"]


def test_update_and_delete_missing_entry(db_session, grid):
    service = make_service(db_session)

    with pytest.raises(NotFoundError):
        service.update_entry("missing", ScheduleEntryUpdate(subject="Art"))
    with pytest.raises(NotFoundError) as exc_info:
        service.delete_entry("missing")

    assert exc_info.value.message == "Schedule entry with id missing not found"


def test_delete_entry_removes_booking(db_session, book):
    entry = book()

    make_service(db_session).delete_entry(entry.id)

    assert entry_count(db_session) == 0


def test_bulk_skip_conflicts_keeps_first_occurrence(db_session, grid, make_payload):
    first = make_payload()
    clashing = make_payload(room_id=grid.room_b.id, section_id=grid.section_y.id)
    third = make_payload(period_id=grid.p2.id)
    entries = [ScheduleEntryCreate(**item) for item in (first, clashing, third)]

    result = make_service(db_session).bulk_create_entries(entries, skip_conflicts=True)

    assert [(item.period_id, item.room_id) for item in result.created] == [
        (grid.p1.id, grid.room_a.id),
        (grid.p2.id, grid.room_a.id),
    ]
    assert [item.index for item in result.skipped] == [2]
    assert [conflict.type for conflict in result.skipped[0].conflicts] == ["teacher"]
    assert result.errors == [f"Entry #2 skipped: {result.skipped[0].conflicts[0].message}"]
    assert entry_count(db_session) == 2


def test_bulk_skip_logs_each_skipped_entry(db_session, grid, make_payload, caplog):
    entries = [
        ScheduleEntryCreate(**make_payload()),
        ScheduleEntryCreate(**make_payload(room_id=grid.room_b.id)),
    ]

    with caplog.at_level(logging.INFO, logger="schoolgrid.services.booking_service"):
        make_service(db_session).bulk_create_entries(entries, skip_conflicts=True)

    skipped_lines = [record.getMessage() for record in caplog.records if "Skipped bulk entry" in record.getMessage()]
    assert skipped_lines == [f"Skipped bulk entry #2 on sunday period {grid.p1.id}: teacher, section conflict"]


def test_bulk_first_occurrence_wins_when_order_is_swapped(db_session, grid, make_payload):
    a = ScheduleEntryCreate(**make_payload(subject="First"))
    b = ScheduleEntryCreate(**make_payload(room_id=grid.room_b.id, section_id=grid.section_y.id, subject="Second"))

    result = make_service(db_session).bulk_create_entries([b, a], skip_conflicts=True)

    assert [item.subject for item in result.created] == ["Second"]
    assert [item.entry.subject for item in result.skipped] == ["First"]


def test_bulk_without_skip_rolls_back_whole_batch(db_session, grid, book, make_payload):
    book(period=grid.p2, room=grid.room_b, section=grid.section_y, teacher=grid.t2)
    entries = [
        ScheduleEntryCreate(**make_payload()),
        ScheduleEntryCreate(**make_payload(teacher_id=grid.t2.id, period_id=grid.p2.id, section_id=grid.section_x.id)),
    ]

    with pytest.raises(ConflictError) as exc_info:
        make_service(db_session).bulk_create_entries(entries)

    assert exc_info.value.message.startswith("Conflict in entry #2: ")
    assert exc_info.value.details["index"] == 2
    assert entry_count(db_session) == 1


def test_bulk_without_skip_rolls_back_on_in_batch_conflict(db_session, make_payload):
    entries = [ScheduleEntryCreate(**make_payload()), ScheduleEntryCreate(**make_payload(subject="Again"))]

    with pytest.raises(ConflictError):
        make_service(db_session).bulk_create_entries(entries)

    assert entry_count(db_session) == 0


def test_bulk_reference_error_aborts_even_when_skipping(db_session, grid, make_payload):
    entries = [
        ScheduleEntryCreate(**make_payload()),
        ScheduleEntryCreate(**make_payload(period_id=grid.p2.id, room_id="missing-room")),
    ]

    with pytest.raises(ReferenceNotFoundError) as exc_info:
        make_service(db_session).bulk_create_entries(entries, skip_conflicts=True)

    assert exc_info.value.message == "Entry #2: Room not found"
    assert exc_info.value.details == {"errors": ["Room not found"], "index": 2}
    assert entry_count(db_session) == 0


def test_bulk_rejects_empty_batch(db_session):
    with pytest.raises(ValidationError):
        make_service(db_session).bulk_create_entries([])
