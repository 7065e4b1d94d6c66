from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import case, func, select
from sqlalchemy.orm import Session, joinedload

from schoolgrid.api.deps import get_booking_service, get_conflict_service, get_db
from schoolgrid.core.calendar import DAY_INDEX, DAY_TOKENS, DayToken
from schoolgrid.core.exceptions import NotFoundError
from schoolgrid.models.grade import Grade, Section
from schoolgrid.models.period import Period
from schoolgrid.models.room import Room
from schoolgrid.models.schedule_entry import ScheduleEntry
from schoolgrid.models.teacher import Teacher
from schoolgrid.schemas.conflict import ConflictCheckRequest, ConflictCheckResult
from schoolgrid.schemas.schedule import (
    BulkScheduleRequest,
    BulkScheduleResult,
    ReferenceCheckRequest,
    ReferenceValidationResult,
    ScheduleEntryCreate,
    ScheduleEntryOut,
    ScheduleEntryPage,
    ScheduleEntryUpdate,
)
from schoolgrid.services.booking_service import BookingService
from schoolgrid.services.conflict_service import ConflictService
from schoolgrid.services.rate_limit import limit_bulk_schedule_writes

router = APIRouter()

DAY_ORDER = case(
    *[(ScheduleEntry.day == day, DAY_INDEX[day.value]) for day in DAY_TOKENS],
    else_=len(DAY_TOKENS),
)


def _entries_query():
    return (
        select(ScheduleEntry)
        .join(ScheduleEntry.period)
        .options(
            joinedload(ScheduleEntry.teacher),
            joinedload(ScheduleEntry.grade),
            joinedload(ScheduleEntry.section),
            joinedload(ScheduleEntry.period),
            joinedload(ScheduleEntry.room),
        )
        .order_by(DAY_ORDER, Period.number, ScheduleEntry.id)
    )


def _list_entries(db: Session, *criteria) -> list[ScheduleEntry]:
    return list(db.execute(_entries_query().where(*criteria)).unique().scalars())


def _require_owner(db: Session, model, owner_id: str, label: str) -> None:
    if db.get(model, owner_id) is None:
        raise NotFoundError(label, owner_id)


@router.get("/", response_model=ScheduleEntryPage)
def list_schedule(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=100),
    day: DayToken | None = Query(default=None),
    db: Session = Depends(get_db),
) -> ScheduleEntryPage:
    criteria = [] if day is None else [ScheduleEntry.day == day]
    total = db.scalar(select(func.count(ScheduleEntry.id)).where(*criteria)) or 0
    stmt = _entries_query().where(*criteria).offset((page - 1) * limit).limit(limit)
    entries = list(db.execute(stmt).unique().scalars())
    return ScheduleEntryPage(
        entries=[ScheduleEntryOut.model_validate(entry) for entry in entries],
        total=total,
        page=page,
        limit=limit,
    )


@router.get("/weekly", response_model=dict[str, list[ScheduleEntryOut]])
def get_weekly_schedule(db: Session = Depends(get_db)) -> dict[str, list[ScheduleEntryOut]]:
    grouped: dict[str, list[ScheduleEntryOut]] = {day.value: [] for day in DAY_TOKENS}
    for entry in _list_entries(db):
        grouped[entry.day.value].append(ScheduleEntryOut.model_validate(entry))
    return grouped


@router.get("/by-day/{day}", response_model=list[ScheduleEntryOut])
def list_by_day(day: DayToken, db: Session = Depends(get_db)) -> list[ScheduleEntryOut]:
    return _list_entries(db, ScheduleEntry.day == day)


@router.get("/by-teacher/{teacher_id}", response_model=list[ScheduleEntryOut])
def list_by_teacher(teacher_id: str, db: Session = Depends(get_db)) -> list[ScheduleEntryOut]:
    _require_owner(db, Teacher, teacher_id, "Teacher")
    return _list_entries(db, ScheduleEntry.teacher_id == teacher_id)


@router.get("/by-section/{section_id}", response_model=list[ScheduleEntryOut])
def list_by_section(section_id: str, db: Session = Depends(get_db)) -> list[ScheduleEntryOut]:
    _require_owner(db, Section, section_id, "Section")
    return _list_entries(db, ScheduleEntry.section_id == section_id)


@router.get("/by-room/{room_id}", response_model=list[ScheduleEntryOut])
def list_by_room(room_id: str, db: Session = Depends(get_db)) -> list[ScheduleEntryOut]:
    _require_owner(db, Room, room_id, "Room")
    return _list_entries(db, ScheduleEntry.room_id == room_id)


@router.get("/by-grade/{grade_id}", response_model=list[ScheduleEntryOut])
def list_by_grade(grade_id: str, db: Session = Depends(get_db)) -> list[ScheduleEntryOut]:
    _require_owner(db, Grade, grade_id, "Grade")
    return _list_entries(db, ScheduleEntry.grade_id == grade_id)


@router.post("/check-conflicts", response_model=ConflictCheckResult)
def check_conflicts(
    payload: ConflictCheckRequest,
    conflicts: ConflictService = Depends(get_conflict_service),
) -> ConflictCheckResult:
    return conflicts.check_conflicts(payload)


@router.post("/validate-references", response_model=ReferenceValidationResult)
def validate_references(
    payload: ReferenceCheckRequest,
    conflicts: ConflictService = Depends(get_conflict_service),
) -> ReferenceValidationResult:
    return conflicts.validate_references(payload)


@router.post(
    "/bulk",
    response_model=BulkScheduleResult,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(limit_bulk_schedule_writes)],
)
def bulk_create_schedule(
    payload: BulkScheduleRequest,
    bookings: BookingService = Depends(get_booking_service),
) -> BulkScheduleResult:
    return bookings.bulk_create_entries(payload.entries, skip_conflicts=payload.skip_conflicts)


@router.get("/{entry_id}", response_model=ScheduleEntryOut)
def get_schedule_entry(entry_id: str, bookings: BookingService = Depends(get_booking_service)) -> ScheduleEntryOut:
    return bookings.get_entry(entry_id)


@router.post("/", response_model=ScheduleEntryOut, status_code=status.HTTP_201_CREATED)
def create_schedule_entry(
    payload: ScheduleEntryCreate,
    bookings: BookingService = Depends(get_booking_service),
) -> ScheduleEntryOut:
    return bookings.create_entry(payload)


@router.put("/{entry_id}", response_model=ScheduleEntryOut)
def update_schedule_entry(
    entry_id: str,
    payload: ScheduleEntryUpdate,
    bookings: BookingService = Depends(get_booking_service),
) -> ScheduleEntryOut:
    return bookings.update_entry(entry_id, payload)


@router.delete("/{entry_id}")
def delete_schedule_entry(entry_id: str, bookings: BookingService = Depends(get_booking_service)) -> dict:
    bookings.delete_entry(entry_id)
    return {"success": True}
