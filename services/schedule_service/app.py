"""
FastAPI service for schedule-based due date resolution.

Schedules are read from the ``scheduleConfig`` collection. When
RECORD_SERVICE_URL is set the collection lives in the record service,
otherwise a local store seeded with the default schedule is used. A failing
store never fails a resolution: the resolver falls back to the default
interval instead.
"""
from __future__ import annotations

import os
import typing as t
from contextlib import asynccontextmanager
from datetime import date

from fastapi import FastAPI, HTTPException
from loguru import logger

from mcp_wrappers.record_store.mcp_service import HttpRecordStore
from quest_planner.models import ScheduleEntry
from quest_planner.resolver import resolve_due_date
from quest_planner.schedule import DEFAULT_SCHEDULE_CONFIG, next_class_info
from quest_planner.subjects import translate_subject_name
from services.shared.models import (
    NextClassResponse,
    ResolveDueDateRequest,
    ResolveDueDateResponse,
    ScheduleEntryModel,
)
from task_store.store import ConfigStore, InMemoryRecordStore, RecordStoreError, SCHEDULE_CONFIG


# Initialized on startup unless already set (tests assign their own)
config_store: t.Optional[ConfigStore] = None


def _default_config_store() -> ConfigStore:
    record_service_url = os.getenv("RECORD_SERVICE_URL")
    if record_service_url:
        logger.info(f"Reading schedules from record service at {record_service_url}")
        return ConfigStore(HttpRecordStore(base_url=record_service_url))

    logger.info("Reading schedules from local default configuration")
    return ConfigStore(InMemoryRecordStore({SCHEDULE_CONFIG: DEFAULT_SCHEDULE_CONFIG}))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize resources on startup and cleanup on shutdown."""
    global config_store
    if config_store is None:
        config_store = _default_config_store()
    yield


app = FastAPI(
    title="Schedule Service",
    description="REST API for subject schedules and due date resolution",
    version="1.0.0",
    lifespan=lifespan,
)


@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "healthy", "service": "schedule-service"}


@app.post("/due-date/resolve", response_model=ResolveDueDateResponse)
async def resolve(request: ResolveDueDateRequest) -> ResolveDueDateResponse:
    """
    Resolve the due date of a task.

    Always answers with a date: unknown subjects, unreachable schedule
    storage and malformed creation dates all degrade to a fallback interval.
    """
    try:
        result = resolve_due_date(
            request.subject,
            request.creation_date,
            schedule_lookup=config_store,
            default_interval=request.default_interval,
            horizon_days=request.horizon_days,
        )
        return ResolveDueDateResponse(
            subject=translate_subject_name(request.subject),
            dueDate=result.due_date_iso,
            calculationMethod=result.calculation_method,
            nextClassInfo=result.next_class_info,
        )
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error resolving due date: {str(e)}")


@app.get("/schedule/{subject}", response_model=ScheduleEntryModel)
async def get_schedule(subject: str) -> ScheduleEntryModel:
    """Return the stored schedule of a subject."""
    canonical = translate_subject_name(subject)
    try:
        entry = config_store.get_schedule(canonical)
    except RecordStoreError as e:
        raise HTTPException(status_code=502, detail=f"Schedule storage unavailable: {e}")
    if entry is None:
        raise HTTPException(status_code=404, detail=f"No schedule for subject '{canonical}'")
    return ScheduleEntryModel(**entry.to_dict())


@app.put("/schedule/{subject}", response_model=ScheduleEntryModel)
async def put_schedule(subject: str, body: ScheduleEntryModel) -> ScheduleEntryModel:
    """Create or replace the schedule of a subject."""
    if body.defaultDueInterval <= 0:
        raise HTTPException(status_code=422, detail="defaultDueInterval must be positive")
    entry = ScheduleEntry(
        subject=translate_subject_name(subject),
        class_days=body.classDays,
        default_due_interval=body.defaultDueInterval,
    )
    try:
        config_store.set_schedule(entry)
    except RecordStoreError as e:
        raise HTTPException(status_code=502, detail=f"Schedule storage unavailable: {e}")
    return ScheduleEntryModel(**entry.to_dict())


@app.get("/next-class/{subject}", response_model=NextClassResponse)
async def next_class(subject: str, today: t.Optional[date] = None) -> NextClassResponse:
    """Tell when the subject's next class takes place, counting today."""
    canonical = translate_subject_name(subject)
    try:
        info = next_class_info(canonical, config_store.get_schedule, today=today)
    except RecordStoreError as e:
        raise HTTPException(status_code=502, detail=f"Schedule storage unavailable: {e}")
    return NextClassResponse(
        subject=canonical,
        found=info.found,
        daysUntil=info.days_until,
        weekday=info.weekday,
        label=info.label,
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8002)
