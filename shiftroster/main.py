import logging

from fastapi import FastAPI

from shiftroster.api.errors import register_exception_handlers
from shiftroster.api.routes import (
    auth,
    availability,
    schedules,
    staffing_limits,
    start_time_targets,
    substitutions,
    time_off,
    worked_hours,
)
from shiftroster.core.config import settings
from shiftroster.db.database import init_db

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="ShiftRoster API", version="0.1.0")

register_exception_handlers(app)

app.include_router(auth.router, prefix="/api/v1")
app.include_router(schedules.router, prefix="/api/v1")
app.include_router(substitutions.router, prefix="/api/v1")
app.include_router(availability.router, prefix="/api/v1")
app.include_router(time_off.router, prefix="/api/v1")
app.include_router(staffing_limits.router, prefix="/api/v1")
app.include_router(start_time_targets.router, prefix="/api/v1")
app.include_router(worked_hours.router, prefix="/api/v1")


@app.on_event("startup")
def on_startup():
    init_db()


@app.get("/health")
def health_check():
    return {"status": "ok"}
