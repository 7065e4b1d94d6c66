from typing import Literal

from pydantic import BaseModel, Field

from schoolgrid.core.calendar import DayToken

ConflictType = Literal["teacher", "room", "section"]


class ConflictDetails(BaseModel):
    day: DayToken
    period_number: int
    teacher_name: str | None = None
    room_name: str | None = None
    section_name: str | None = None
    grade_name: str | None = None


class ConflictOut(BaseModel):
    type: ConflictType
    message: str
    conflicting_entry_id: str
    details: ConflictDetails


class ConflictCheckRequest(BaseModel):
    teacher_id: str = Field(min_length=1)
    section_id: str = Field(min_length=1)
    period_id: str = Field(min_length=1)
    room_id: str = Field(min_length=1)
    day: DayToken
    exclude_entry_id: str | None = None


class ConflictCheckResult(BaseModel):
    has_conflict: bool
    conflicts: list[ConflictOut] = Field(default_factory=list)

    @property
    def first_message(self) -> str | None:
        return self.conflicts[0].message if self.conflicts else None
