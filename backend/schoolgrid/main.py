from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from schoolgrid.api.routes import (
    export,
    grades,
    health,
    periods,
    rooms,
    schedule,
    sections,
    stats,
    teachers,
)
from schoolgrid.core.config import get_settings
from schoolgrid.core.exceptions import AppError
from schoolgrid.core.logging import configure_logging
from schoolgrid.core.middleware import RequestSizeLimitMiddleware, SecurityHeadersMiddleware
from schoolgrid.db.bootstrap import ensure_schema

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging(settings.log_level)
    if settings.bootstrap_create_tables:
        ensure_schema()
    logger.info("%s started", settings.project_name)
    yield


async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "details": exc.details},
    )


app = FastAPI(title=settings.project_name, lifespan=lifespan)
app.add_exception_handler(AppError, app_error_handler)

app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_size_bytes)
app.add_middleware(SecurityHeadersMiddleware, settings=settings)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
app.include_router(teachers.router, prefix=f"{settings.api_prefix}/teachers", tags=["teachers"])
app.include_router(grades.router, prefix=f"{settings.api_prefix}/grades", tags=["grades"])
app.include_router(sections.router, prefix=f"{settings.api_prefix}/sections", tags=["sections"])
app.include_router(rooms.router, prefix=f"{settings.api_prefix}/rooms", tags=["rooms"])
app.include_router(periods.router, prefix=f"{settings.api_prefix}/periods", tags=["periods"])
app.include_router(schedule.router, prefix=f"{settings.api_prefix}/schedule", tags=["schedule"])
app.include_router(stats.router, prefix=f"{settings.api_prefix}/stats", tags=["stats"])
app.include_router(export.router, prefix=f"{settings.api_prefix}/export", tags=["export"])
