"""create schedule grid

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None

DAY_TOKENS = ("sunday", "monday", "tuesday", "wednesday", "thursday")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def _entry_fk(column: str, table: str) -> sa.Column:
    return sa.Column(
        column,
        sa.String(length=36),
        sa.ForeignKey(f"{table}.id", ondelete="CASCADE"),
        nullable=False,
    )


def upgrade() -> None:
    room_type = sa.Enum("regular", "lab", "computer", name="room_type")
    day_token = sa.Enum(*DAY_TOKENS, name="day_token")

    op.create_table(
        "teachers",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("subject", sa.String(length=200), nullable=False),
        sa.Column("weekly_periods", sa.Integer(), nullable=False, server_default="20"),
        sa.Column("work_days", sa.Text(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "grades",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_grades_name", "grades", ["name"], unique=True)

    op.create_table(
        "sections",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column(
            "grade_id",
            sa.String(length=36),
            sa.ForeignKey("grades.id", ondelete="CASCADE"),
            nullable=False,
        ),
        *_timestamps(),
        sa.UniqueConstraint("grade_id", "name", name="uq_sections_grade_name"),
    )
    op.create_index("ix_sections_grade_id", "sections", ["grade_id"])

    op.create_table(
        "rooms",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False, server_default="30"),
        sa.Column("type", room_type, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_rooms_name", "rooms", ["name"], unique=True)

    op.create_table(
        "periods",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("number", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_periods_number", "periods", ["number"], unique=True)

    op.create_table(
        "schedule_entries",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("day", day_token, nullable=False),
        sa.Column("subject", sa.String(length=200), nullable=False),
        _entry_fk("teacher_id", "teachers"),
        _entry_fk("grade_id", "grades"),
        _entry_fk("section_id", "sections"),
        _entry_fk("period_id", "periods"),
        _entry_fk("room_id", "rooms"),
        *_timestamps(),
        sa.UniqueConstraint("teacher_id", "day", "period_id", name="uq_schedule_entries_teacher_slot"),
        sa.UniqueConstraint("room_id", "day", "period_id", name="uq_schedule_entries_room_slot"),
        sa.UniqueConstraint("section_id", "day", "period_id", name="uq_schedule_entries_section_slot"),
    )
    for column in ("day", "teacher_id", "grade_id", "section_id", "period_id", "room_id"):
        op.create_index(f"ix_schedule_entries_{column}", "schedule_entries", [column])


def downgrade() -> None:
    for column in ("room_id", "period_id", "section_id", "grade_id", "teacher_id", "day"):
        op.drop_index(f"ix_schedule_entries_{column}", table_name="schedule_entries")
    op.drop_table("schedule_entries")
    op.drop_index("ix_periods_number", table_name="periods")
    op.drop_table("periods")
    op.drop_index("ix_rooms_name", table_name="rooms")
    op.drop_table("rooms")
    op.drop_index("ix_sections_grade_id", table_name="sections")
    op.drop_table("sections")
    op.drop_index("ix_grades_name", table_name="grades")
    op.drop_table("grades")
    op.drop_table("teachers")

    bind = op.get_bind()
    sa.Enum(name="day_token").drop(bind, checkfirst=True)
    sa.Enum(name="room_type").drop(bind, checkfirst=True)
