from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

ROOT = Path(__file__).resolve().parents[2]


def alembic_config(database_url: str) -> Config:
    config = Config(str(ROOT / "alembic.ini"))
    config.set_main_option("sqlalchemy.url", database_url)
    config.attributes["configure_logger"] = False
    return config


def test_initial_revision_creates_schedule_grid(tmp_path):
    database_url = f"sqlite+pysqlite:///{tmp_path / 'migrated.db'}"
    config = alembic_config(database_url)

    command.upgrade(config, "head")

    engine = create_engine(database_url)
    inspector = inspect(engine)
    assert {"teachers", "grades", "sections", "rooms", "periods", "schedule_entries"} <= set(
        inspector.get_table_names()
    )
    unique_sets = {
        constraint["name"]: constraint["column_names"]
        for constraint in inspector.get_unique_constraints("schedule_entries")
    }
    assert unique_sets == {
        "uq_schedule_entries_teacher_slot": ["teacher_id", "day", "period_id"],
        "uq_schedule_entries_room_slot": ["room_id", "day", "period_id"],
        "uq_schedule_entries_section_slot": ["section_id", "day", "period_id"],
    }
    section_uniques = [item["column_names"] for item in inspector.get_unique_constraints("sections")]
    assert ["grade_id", "name"] in section_uniques

    command.downgrade(config, "base")
    assert "schedule_entries" not in inspect(engine).get_table_names()
    engine.dispose()
