import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from schoolgrid.db.base import Base


class Grade(Base):
    __tablename__ = "grades"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(100), unique=True, index=True, nullable=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    sections: Mapped[list["Section"]] = relationship(
        back_populates="grade", cascade="all, delete-orphan", passive_deletes=True, order_by="Section.name"
    )
    schedule_entries: Mapped[list["ScheduleEntry"]] = relationship(  # noqa: F821
        back_populates="grade", cascade="all, delete-orphan", passive_deletes=True
    )


class Section(Base):
    __tablename__ = "sections"
    __table_args__ = (
        UniqueConstraint("grade_id", "name", name="uq_sections_grade_name"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    grade_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("grades.id", ondelete="CASCADE"), index=True, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    grade: Mapped[Grade] = relationship(back_populates="sections")
    schedule_entries: Mapped[list["ScheduleEntry"]] = relationship(  # noqa: F821
        back_populates="section", cascade="all, delete-orphan", passive_deletes=True
    )
