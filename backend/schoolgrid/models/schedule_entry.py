import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from schoolgrid.core.calendar import DayToken
from schoolgrid.db.base import Base
from schoolgrid.models.grade import Grade, Section
from schoolgrid.models.period import Period
from schoolgrid.models.room import Room
from schoolgrid.models.teacher import Teacher


class ScheduleEntry(Base):
    __tablename__ = "schedule_entries"
    __table_args__ = (
        UniqueConstraint("teacher_id", "day", "period_id", name="uq_schedule_entries_teacher_slot"),
        UniqueConstraint("room_id", "day", "period_id", name="uq_schedule_entries_room_slot"),
        UniqueConstraint("section_id", "day", "period_id", name="uq_schedule_entries_section_slot"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    day: Mapped[DayToken] = mapped_column(SAEnum(DayToken, name="day_token"), index=True, nullable=False)
    subject: Mapped[str] = mapped_column(String(200), nullable=False)
    teacher_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("teachers.id", ondelete="CASCADE"), index=True, nullable=False
    )
    grade_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("grades.id", ondelete="CASCADE"), index=True, nullable=False
    )
    section_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("sections.id", ondelete="CASCADE"), index=True, nullable=False
    )
    period_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("periods.id", ondelete="CASCADE"), index=True, nullable=False
    )
    room_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("rooms.id", ondelete="CASCADE"), index=True, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    teacher: Mapped[Teacher] = relationship(back_populates="schedule_entries")
    grade: Mapped[Grade] = relationship(back_populates="schedule_entries")
    section: Mapped[Section] = relationship(back_populates="schedule_entries")
    period: Mapped[Period] = relationship(back_populates="schedule_entries")
    room: Mapped[Room] = relationship(back_populates="schedule_entries")
