from pydantic import BaseModel, Field, field_validator

from schoolgrid.core.calendar import DayToken, order_days


class TeacherBase(BaseModel):
    name: str = Field(min_length=2, max_length=200)
    subject: str = Field(min_length=1, max_length=200)
    weekly_periods: int = Field(default=20, ge=1, le=40)
    work_days: list[DayToken] = Field(min_length=1, max_length=5)
    notes: str | None = Field(default=None, max_length=2000)

    @field_validator("work_days", mode="before")
    @classmethod
    def normalize_work_days(cls, value):
        if value is None:
            return value
        return order_days(value)


class TeacherCreate(TeacherBase):
    pass


class TeacherUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=200)
    subject: str | None = Field(default=None, min_length=1, max_length=200)
    weekly_periods: int | None = Field(default=None, ge=1, le=40)
    work_days: list[DayToken] | None = Field(default=None, min_length=1, max_length=5)
    notes: str | None = Field(default=None, max_length=2000)

    @field_validator("work_days", mode="before")
    @classmethod
    def normalize_optional_work_days(cls, value):
        if value is None:
            return None
        return order_days(value)


class TeacherOut(TeacherBase):
    id: str

    model_config = {"from_attributes": True}


class TeacherSummary(BaseModel):
    id: str
    name: str
    subject: str

    model_config = {"from_attributes": True}
