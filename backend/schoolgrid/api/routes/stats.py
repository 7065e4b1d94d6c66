from fastapi import APIRouter, Depends

from schoolgrid.api.deps import get_stats_service
from schoolgrid.schemas.stats import OverviewStats, RoomStats, TeacherStats, UnusedSlot
from schoolgrid.services.stats_service import StatsService

router = APIRouter()


@router.get("/teachers", response_model=list[TeacherStats])
def teacher_stats(stats: StatsService = Depends(get_stats_service)) -> list[TeacherStats]:
    return stats.get_teacher_stats()


@router.get("/rooms", response_model=list[RoomStats])
def room_stats(stats: StatsService = Depends(get_stats_service)) -> list[RoomStats]:
    return stats.get_room_stats()


@router.get("/overview", response_model=OverviewStats)
def overview_stats(stats: StatsService = Depends(get_stats_service)) -> OverviewStats:
    return stats.get_overview_stats()


@router.get("/unused-slots", response_model=list[UnusedSlot])
def unused_slots(stats: StatsService = Depends(get_stats_service)) -> list[UnusedSlot]:
    return stats.get_unused_slots()
