"""
Health check endpoints for the Rent Reminder Service.
"""
import asyncio
import time
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from rent_reminder.core.config import Settings
from rent_reminder.core.dependencies import (
    get_app_settings,
    get_reminder_scheduler,
    get_tenant_store,
)
from rent_reminder.core.logging import get_logger
from rent_reminder.services.reminder_scheduler import ReminderScheduler
from rent_reminder.services.tenant_store import TenantStore

router = APIRouter()
logger = get_logger(__name__)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    uptime_seconds: float
    timestamp: datetime
    service_name: str


class DetailedHealthResponse(HealthResponse):
    """Detailed health check response model."""

    checks: dict
    next_reminder_at: Optional[datetime] = None


def _uptime(request: Request) -> float:
    start_time = getattr(request.app.state, "start_time", time.time())
    return time.time() - start_time


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request, settings: Settings = Depends(get_app_settings)):
    """
    Basic health check endpoint.

    Returns service status, version, and uptime.
    """
    return HealthResponse(
        status="healthy",
        version=settings.service_version,
        uptime_seconds=_uptime(request),
        timestamp=datetime.utcnow(),
        service_name=settings.service_name,
    )


@router.get("/health/detailed", response_model=DetailedHealthResponse)
async def detailed_health_check(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    store: TenantStore = Depends(get_tenant_store),
    scheduler: ReminderScheduler = Depends(get_reminder_scheduler),
):
    """
    Detailed health check endpoint.

    Adds database connectivity, scheduler state and channel configuration.
    """
    database_healthy = await asyncio.to_thread(store.ping)

    checks = {
        "database": "healthy" if database_healthy else "unhealthy",
        "scheduler": "running" if scheduler.running else "stopped",
        "channel": "configured" if settings.channel_webhook_url else "not_configured",
    }

    response = DetailedHealthResponse(
        status="healthy" if database_healthy else "unhealthy",
        version=settings.service_version,
        uptime_seconds=_uptime(request),
        timestamp=datetime.utcnow(),
        service_name=settings.service_name,
        checks=checks,
        next_reminder_at=scheduler.next_run_time(),
    )

    logger.info("Detailed health check completed", status=response.status, checks=checks)

    return response
