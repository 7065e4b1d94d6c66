from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from schoolgrid.api.deps import get_db
from schoolgrid.models.grade import Grade, Section
from schoolgrid.schemas.grade import SectionCreate, SectionOut, SectionUpdate

router = APIRouter()


def _get_section_or_404(db: Session, section_id: str) -> Section:
    section = db.get(Section, section_id)
    if section is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Section not found")
    return section


def _ensure_unique_in_grade(db: Session, grade_id: str, name: str, *, exclude_id: str | None = None) -> None:
    stmt = select(Section).where(Section.grade_id == grade_id, Section.name == name)
    if exclude_id is not None:
        stmt = stmt.where(Section.id != exclude_id)
    if db.execute(stmt).scalar_one_or_none() is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Section name already exists in this grade")


@router.get("/", response_model=list[SectionOut])
def list_sections(grade_id: str | None = Query(default=None), db: Session = Depends(get_db)) -> list[SectionOut]:
    stmt = select(Section).order_by(Section.grade_id, Section.name)
    if grade_id is not None:
        stmt = stmt.where(Section.grade_id == grade_id)
    return list(db.execute(stmt).scalars())


@router.get("/{section_id}", response_model=SectionOut)
def get_section(section_id: str, db: Session = Depends(get_db)) -> SectionOut:
    return _get_section_or_404(db, section_id)


@router.post("/", response_model=SectionOut, status_code=status.HTTP_201_CREATED)
def create_section(payload: SectionCreate, db: Session = Depends(get_db)) -> SectionOut:
    if db.get(Grade, payload.grade_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Grade not found")
    _ensure_unique_in_grade(db, payload.grade_id, payload.name)
    section = Section(**payload.model_dump())
    db.add(section)
    db.commit()
    db.refresh(section)
    return section


@router.put("/{section_id}", response_model=SectionOut)
def update_section(section_id: str, payload: SectionUpdate, db: Session = Depends(get_db)) -> SectionOut:
    section = _get_section_or_404(db, section_id)
    if payload.name is not None:
        _ensure_unique_in_grade(db, section.grade_id, payload.name, exclude_id=section_id)
        section.name = payload.name
    db.commit()
    db.refresh(section)
    return section


@router.delete("/{section_id}")
def delete_section(section_id: str, db: Session = Depends(get_db)) -> dict:
    section = _get_section_or_404(db, section_id)
    db.delete(section)
    db.commit()
    return {"success": True}
