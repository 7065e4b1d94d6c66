from pydantic import BaseModel, Field


class GradeCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    order: int = Field(default=0, ge=0)


class GradeUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    order: int | None = Field(default=None, ge=0)


class SectionCreate(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    grade_id: str


class SectionUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=50)


class SectionOut(BaseModel):
    id: str
    name: str
    grade_id: str

    model_config = {"from_attributes": True}


class GradeOut(BaseModel):
    id: str
    name: str
    order: int
    sections: list[SectionOut] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class GradeSummary(BaseModel):
    id: str
    name: str

    model_config = {"from_attributes": True}


class SectionSummary(BaseModel):
    id: str
    name: str

    model_config = {"from_attributes": True}
