from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from schoolgrid.api.deps import get_db
from schoolgrid.core.calendar import parse_time_to_minutes, slots_overlap
from schoolgrid.models.period import Period
from schoolgrid.schemas.period import PeriodCreate, PeriodOut, PeriodUpdate

router = APIRouter()


def _get_period_or_404(db: Session, period_id: str) -> Period:
    period = db.get(Period, period_id)
    if period is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Period not found")
    return period


def _validate_period(
    db: Session,
    *,
    number: int,
    start_time: str,
    end_time: str,
    exclude_id: str | None = None,
) -> None:
    start = parse_time_to_minutes(start_time)
    end = parse_time_to_minutes(end_time)
    if end <= start:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="end_time must be after start_time",
        )

    stmt = select(Period)
    if exclude_id is not None:
        stmt = stmt.where(Period.id != exclude_id)
    for other in db.execute(stmt).scalars():
        if other.number == number:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"Period {number} already exists")
        other_start = parse_time_to_minutes(other.start_time)
        other_end = parse_time_to_minutes(other.end_time)
        if slots_overlap(start, end, other_start, other_end):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Period time overlaps period {other.number} ({other.time_range})",
            )


@router.get("/", response_model=list[PeriodOut])
def list_periods(db: Session = Depends(get_db)) -> list[PeriodOut]:
    return list(db.execute(select(Period).order_by(Period.number)).scalars())


@router.get("/{period_id}", response_model=PeriodOut)
def get_period(period_id: str, db: Session = Depends(get_db)) -> PeriodOut:
    return _get_period_or_404(db, period_id)


@router.post("/", response_model=PeriodOut, status_code=status.HTTP_201_CREATED)
def create_period(payload: PeriodCreate, db: Session = Depends(get_db)) -> PeriodOut:
    _validate_period(db, number=payload.number, start_time=payload.start_time, end_time=payload.end_time)
    period = Period(**payload.model_dump())
    db.add(period)
    db.commit()
    db.refresh(period)
    return period


@router.put("/{period_id}", response_model=PeriodOut)
def update_period(period_id: str, payload: PeriodUpdate, db: Session = Depends(get_db)) -> PeriodOut:
    period = _get_period_or_404(db, period_id)
    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    merged = {
        "number": data.get("number", period.number),
        "start_time": data.get("start_time", period.start_time),
        "end_time": data.get("end_time", period.end_time),
    }
    _validate_period(db, exclude_id=period_id, **merged)
    for key, value in data.items():
        setattr(period, key, value)
    db.commit()
    db.refresh(period)
    return period


@router.delete("/{period_id}")
def delete_period(period_id: str, db: Session = Depends(get_db)) -> dict:
    period = _get_period_or_404(db, period_id)
    db.delete(period)
    db.commit()
    return {"success": True}
