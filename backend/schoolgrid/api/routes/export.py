from datetime import date

from fastapi import APIRouter, Depends, Query, Response

from schoolgrid.api.deps import get_export_service
from schoolgrid.core.calendar import DayToken
from schoolgrid.schemas.export import ExportFilter, JsonExport, WeeklyExport
from schoolgrid.services.export_service import ExportService

router = APIRouter()


def export_filters(
    day: DayToken | None = Query(default=None),
    teacher_id: str | None = Query(default=None),
    grade_id: str | None = Query(default=None),
    section_id: str | None = Query(default=None),
    room_id: str | None = Query(default=None),
) -> ExportFilter:
    return ExportFilter(day=day, teacher_id=teacher_id, grade_id=grade_id, section_id=section_id, room_id=room_id)


@router.get("/json", response_model=JsonExport)
def export_json(
    filters: ExportFilter = Depends(export_filters),
    exporter: ExportService = Depends(get_export_service),
) -> JsonExport:
    return exporter.export_json(filters)


@router.get("/csv")
def export_csv(
    filters: ExportFilter = Depends(export_filters),
    exporter: ExportService = Depends(get_export_service),
) -> Response:
    filename = f"schedule-{date.today().isoformat()}.csv"
    return Response(
        content=exporter.export_csv(filters),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/weekly", response_model=WeeklyExport)
def export_weekly(
    filters: ExportFilter = Depends(export_filters),
    exporter: ExportService = Depends(get_export_service),
) -> WeeklyExport:
    return exporter.export_weekly(filters)
