from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from schoolgrid.api.deps import get_db
from schoolgrid.models.room import Room
from schoolgrid.schemas.room import RoomCreate, RoomOut, RoomUpdate

router = APIRouter()


def _get_room_or_404(db: Session, room_id: str) -> Room:
    room = db.get(Room, room_id)
    if room is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    return room


def _ensure_unique_name(db: Session, name: str, *, exclude_id: str | None = None) -> None:
    stmt = select(Room).where(Room.name == name)
    if exclude_id is not None:
        stmt = stmt.where(Room.id != exclude_id)
    if db.execute(stmt).scalar_one_or_none() is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Room name already exists")


@router.get("/", response_model=list[RoomOut])
def list_rooms(db: Session = Depends(get_db)) -> list[RoomOut]:
    return list(db.execute(select(Room).order_by(Room.name)).scalars())


@router.get("/{room_id}", response_model=RoomOut)
def get_room(room_id: str, db: Session = Depends(get_db)) -> RoomOut:
    return _get_room_or_404(db, room_id)


@router.post("/", response_model=RoomOut, status_code=status.HTTP_201_CREATED)
def create_room(payload: RoomCreate, db: Session = Depends(get_db)) -> RoomOut:
    _ensure_unique_name(db, payload.name)
    room = Room(**payload.model_dump())
    db.add(room)
    db.commit()
    db.refresh(room)
    return room


@router.put("/{room_id}", response_model=RoomOut)
def update_room(room_id: str, payload: RoomUpdate, db: Session = Depends(get_db)) -> RoomOut:
    room = _get_room_or_404(db, room_id)
    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in data:
        _ensure_unique_name(db, data["name"], exclude_id=room_id)
    for key, value in data.items():
        setattr(room, key, value)
    db.commit()
    db.refresh(room)
    return room


@router.delete("/{room_id}")
def delete_room(room_id: str, db: Session = Depends(get_db)) -> dict:
    room = _get_room_or_404(db, room_id)
    db.delete(room)
    db.commit()
    return {"success": True}
