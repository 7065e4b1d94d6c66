from pydantic import BaseModel, Field

from schoolgrid.core.calendar import DayToken
from schoolgrid.schemas.conflict import ConflictOut
from schoolgrid.schemas.grade import GradeSummary, SectionSummary
from schoolgrid.schemas.period import PeriodSummary
from schoolgrid.schemas.room import RoomSummary
from schoolgrid.schemas.teacher import TeacherSummary

BOOKING_FIELDS = ("teacher_id", "grade_id", "section_id", "period_id", "room_id", "day", "subject")


class ReferenceCheckRequest(BaseModel):
    teacher_id: str = Field(min_length=1)
    grade_id: str = Field(min_length=1)
    section_id: str = Field(min_length=1)
    period_id: str = Field(min_length=1)
    room_id: str = Field(min_length=1)


class ReferenceValidationResult(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)


class ScheduleEntryCreate(ReferenceCheckRequest):
    day: DayToken
    subject: str = Field(min_length=1, max_length=200)


class ScheduleEntryUpdate(BaseModel):
    teacher_id: str | None = Field(default=None, min_length=1)
    grade_id: str | None = Field(default=None, min_length=1)
    section_id: str | None = Field(default=None, min_length=1)
    period_id: str | None = Field(default=None, min_length=1)
    room_id: str | None = Field(default=None, min_length=1)
    day: DayToken | None = None
    subject: str | None = Field(default=None, min_length=1, max_length=200)


class ScheduleEntryOut(BaseModel):
    id: str
    day: DayToken
    subject: str
    teacher_id: str
    grade_id: str
    section_id: str
    period_id: str
    room_id: str
    teacher: TeacherSummary
    grade: GradeSummary
    section: SectionSummary
    period: PeriodSummary
    room: RoomSummary

    model_config = {"from_attributes": True}


class ScheduleEntryPage(BaseModel):
    entries: list[ScheduleEntryOut]
    total: int
    page: int
    limit: int


class BulkScheduleRequest(BaseModel):
    entries: list[ScheduleEntryCreate] = Field(min_length=1, max_length=500)
    skip_conflicts: bool = False


class SkippedEntry(BaseModel):
    index: int
    entry: ScheduleEntryCreate
    conflicts: list[ConflictOut]


class BulkScheduleResult(BaseModel):
    created: list[ScheduleEntryOut] = Field(default_factory=list)
    skipped: list[SkippedEntry] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
