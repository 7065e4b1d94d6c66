import uuid
from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from schoolgrid.core.calendar import DayToken, normalize_day
from schoolgrid.db.base import Base
from schoolgrid.db.types import DayTokenSet


class Teacher(Base):
    __tablename__ = "teachers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    subject: Mapped[str] = mapped_column(String(200), nullable=False)
    weekly_periods: Mapped[int] = mapped_column(Integer, nullable=False, default=20)
    work_days: Mapped[frozenset[DayToken]] = mapped_column(DayTokenSet(), nullable=False, default=lambda: frozenset())
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    schedule_entries: Mapped[list["ScheduleEntry"]] = relationship(  # noqa: F821
        back_populates="teacher", cascade="all, delete-orphan", passive_deletes=True
    )

    def works_on(self, day: DayToken | str) -> bool:
        return normalize_day(day) in self.work_days
