from __future__ import annotations

import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Connection, Engine

from schoolgrid.db.base import Base
from schoolgrid.db.session import engine as default_engine

logger = logging.getLogger(__name__)

REQUIRED_TABLES: tuple[str, ...] = (
    "teachers",
    "grades",
    "sections",
    "rooms",
    "periods",
    "schedule_entries",
)


def missing_tables(bind: Engine | Connection) -> list[str]:
    table_names = set(inspect(bind).get_table_names())
    return [name for name in REQUIRED_TABLES if name not in table_names]


def ensure_schema(bind: Engine | None = None) -> None:
    # Registers every mapped table on Base.metadata.
    import schoolgrid.models  # noqa: F401

    target = bind if bind is not None else default_engine
    try:
        Base.metadata.create_all(bind=target)
        missing = missing_tables(target)
        if missing:
            raise RuntimeError(f"Missing required tables: {', '.join(missing)}")
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Schema bootstrap failed")
        raise RuntimeError("Schema bootstrap failed") from exc
    logger.info("Schema ready (%d tables)", len(REQUIRED_TABLES))
