from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from schoolgrid.api.deps import get_db
from schoolgrid.models.grade import Grade
from schoolgrid.schemas.grade import GradeCreate, GradeOut, GradeUpdate

router = APIRouter()


def _get_grade_or_404(db: Session, grade_id: str) -> Grade:
    grade = db.get(Grade, grade_id)
    if grade is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Grade not found")
    return grade


def _ensure_unique_name(db: Session, name: str, *, exclude_id: str | None = None) -> None:
    stmt = select(Grade).where(Grade.name == name)
    if exclude_id is not None:
        stmt = stmt.where(Grade.id != exclude_id)
    if db.execute(stmt).scalar_one_or_none() is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Grade name already exists")


@router.get("/", response_model=list[GradeOut])
def list_grades(db: Session = Depends(get_db)) -> list[GradeOut]:
    stmt = select(Grade).options(selectinload(Grade.sections)).order_by(Grade.order, Grade.name)
    return list(db.execute(stmt).scalars())


@router.get("/{grade_id}", response_model=GradeOut)
def get_grade(grade_id: str, db: Session = Depends(get_db)) -> GradeOut:
    return _get_grade_or_404(db, grade_id)


@router.post("/", response_model=GradeOut, status_code=status.HTTP_201_CREATED)
def create_grade(payload: GradeCreate, db: Session = Depends(get_db)) -> GradeOut:
    _ensure_unique_name(db, payload.name)
    grade = Grade(**payload.model_dump())
    db.add(grade)
    db.commit()
    db.refresh(grade)
    return grade


@router.put("/{grade_id}", response_model=GradeOut)
def update_grade(grade_id: str, payload: GradeUpdate, db: Session = Depends(get_db)) -> GradeOut:
    grade = _get_grade_or_404(db, grade_id)
    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in data:
        _ensure_unique_name(db, data["name"], exclude_id=grade_id)
    for key, value in data.items():
        setattr(grade, key, value)
    db.commit()
    db.refresh(grade)
    return grade


@router.delete("/{grade_id}")
def delete_grade(grade_id: str, db: Session = Depends(get_db)) -> dict:
    grade = _get_grade_or_404(db, grade_id)
    db.delete(grade)
    db.commit()
    return {"success": True}
