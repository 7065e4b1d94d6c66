from pydantic import BaseModel, Field, field_validator, model_validator

from schoolgrid.core.calendar import TIME_PATTERN, parse_time_to_minutes


class PeriodBase(BaseModel):
    number: int = Field(ge=1, le=10)
    start_time: str
    end_time: str

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_format(cls, value: str) -> str:
        if not TIME_PATTERN.match(value):
            raise ValueError("Time must be in HH:MM 24-hour format")
        return value

    @model_validator(mode="after")
    def validate_order(self) -> "PeriodBase":
        if parse_time_to_minutes(self.end_time) <= parse_time_to_minutes(self.start_time):
            raise ValueError("end_time must be after start_time")
        return self


class PeriodCreate(PeriodBase):
    pass


class PeriodUpdate(BaseModel):
    number: int | None = Field(default=None, ge=1, le=10)
    start_time: str | None = None
    end_time: str | None = None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_optional_time_format(cls, value: str | None) -> str | None:
        if value is not None and not TIME_PATTERN.match(value):
            raise ValueError("Time must be in HH:MM 24-hour format")
        return value


class PeriodOut(PeriodBase):
    id: str

    model_config = {"from_attributes": True}


class PeriodSummary(BaseModel):
    id: str
    number: int
    start_time: str
    end_time: str

    model_config = {"from_attributes": True}
