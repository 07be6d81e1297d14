"""
FastAPI app entrypoint.

SAD backend: workers, assignments, notifications, holidays, balances and route travel time.
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from apscheduler.schedulers.background import BackgroundScheduler
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load .env from backend/ before any app code
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from sad.api.routes import (
    assignments,
    balances,
    devices,
    diagnose,
    holidays,
    notification_settings,
    notifications,
    route,
    workers,
)
from sad.config import settings
from sad.core.constants import NOTIFICATION_CLEANUP_INTERVAL_HOURS, NOTIFICATION_CLEANUP_JOB_ID
from sad.scheduler.notification_cleanup_job import run_notification_cleanup_job

logger = logging.getLogger(__name__)

_scheduler = BackgroundScheduler()


@asynccontextmanager
async def lifespan(app: FastAPI):
    _scheduler.add_job(
        run_notification_cleanup_job,
        "interval",
        hours=NOTIFICATION_CLEANUP_INTERVAL_HOURS,
        id=NOTIFICATION_CLEANUP_JOB_ID,
        replace_existing=True,
    )
    _scheduler.start()
    app.state.scheduler = _scheduler
    print("\n" + "=" * 60)
    print("  BACKEND READY  http://127.0.0.1:8000")
    print("  API docs       http://127.0.0.1:8000/docs")
    print("  Health         http://127.0.0.1:8000/health")
    print("=" * 60 + "\n")
    logger.info("Backend ready at http://127.0.0.1:8000")
    yield
    _scheduler.shutdown(wait=False)


app = FastAPI(title="SAD Backend", version="0.1.0", lifespan=lifespan)

# CORS: dev origins + optional CORS_ORIGINS env (comma-separated) for the deployed admin panel
_cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:3001",
    "http://127.0.0.1:3001",
]
if settings.cors_origins:
    _cors_origins.extend(o.strip() for o in settings.cors_origins.split(",") if o.strip())
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(workers.router, prefix="/api", tags=["workers"])
app.include_router(notifications.router, prefix="/api", tags=["notifications"])
app.include_router(devices.router, prefix="/api", tags=["devices"])
app.include_router(notification_settings.router, prefix="/api", tags=["notification-settings"])
app.include_router(holidays.router, prefix="/api", tags=["holidays"])
app.include_router(assignments.router, prefix="/api", tags=["assignments"])
app.include_router(balances.router, prefix="/api", tags=["balances"])
app.include_router(route.router, prefix="/api", tags=["route"])
app.include_router(diagnose.router, prefix="/api", tags=["diagnose"])


@app.get("/", include_in_schema=False)
def root():
    """Root: point to API docs and health."""
    return {"message": "SAD API", "docs": "/docs", "health": "/health"}


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
