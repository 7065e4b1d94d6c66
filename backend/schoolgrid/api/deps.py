from collections.abc import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from schoolgrid.db.session import SessionLocal
from schoolgrid.services.booking_service import BookingService
from schoolgrid.services.conflict_service import ConflictService
from schoolgrid.services.export_service import ExportService
from schoolgrid.services.stats_service import StatsService


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_conflict_service(db: Session = Depends(get_db)) -> ConflictService:
    return ConflictService(db)


def get_booking_service(
    db: Session = Depends(get_db),
    conflicts: ConflictService = Depends(get_conflict_service),
) -> BookingService:
    return BookingService(db, conflicts)


def get_stats_service(db: Session = Depends(get_db)) -> StatsService:
    return StatsService(db)


def get_export_service(db: Session = Depends(get_db)) -> ExportService:
    return ExportService(db)
