"""Main FastAPI application for the Rent Reminder Service."""

import asyncio
import time
from typing import Optional

from fastapi import FastAPI

from rent_reminder.api.health import router as health_router
from rent_reminder.api.messages import router as messages_router
from rent_reminder.api.reminders import router as reminders_router
from rent_reminder.core.config import Settings, get_settings
from rent_reminder.core.exceptions import StorageError
from rent_reminder.core.logging import get_logger, setup_logging
from rent_reminder.core.middleware import CorrelationIDMiddleware
from rent_reminder.services.channel_client import ChannelClient
from rent_reminder.services.command_service import CommandInterpreter
from rent_reminder.services.reminder_scheduler import ReminderScheduler
from rent_reminder.services.tenant_store import TenantStore, create_db_engine

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[TenantStore] = None,
    channel_client: Optional[ChannelClient] = None,
) -> FastAPI:
    """
    Build the application and its components.

    Args:
        settings: Settings to use; loaded from the environment when None
        store: Tenant store; built from ``settings.database_url`` when None
        channel_client: Reminder destination; built from settings when None
    """
    settings = settings or get_settings()
    setup_logging(
        log_level=settings.log_level,
        service_name=settings.service_name,
        service_version=settings.service_version,
    )

    if store is None:
        store = TenantStore(
            create_db_engine(settings),
            startup_retry_attempts=settings.startup_retry_attempts,
        )
    if channel_client is None:
        channel_client = ChannelClient(
            webhook_url=settings.channel_webhook_url,
            channel_id=settings.channel_id,
            timeout=settings.channel_timeout,
        )

    app = FastAPI(
        title="Rent Reminder Service",
        description="Tracks tenants and posts payment-day reminders to a chat channel",
        version=settings.service_version,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.settings = settings
    app.state.tenant_store = store
    app.state.channel_client = channel_client
    app.state.command_interpreter = CommandInterpreter(
        store,
        move_in_timezone=settings.move_in_timezone,
        move_in_year=settings.move_in_year,
        prefix=settings.command_prefix,
    )
    app.state.reminder_scheduler = ReminderScheduler(
        store,
        channel_client,
        timezone=settings.reminder_timezone,
        hour=settings.reminder_hour,
        minute=settings.reminder_minute,
        dedupe=settings.reminder_dedupe,
        misfire_grace_seconds=settings.reminder_misfire_grace_seconds,
    )

    app.add_middleware(CorrelationIDMiddleware)

    app.include_router(messages_router, prefix=settings.api_prefix, tags=["messages"])
    app.include_router(reminders_router, prefix=settings.api_prefix, tags=["reminders"])
    app.include_router(health_router, prefix=settings.api_prefix, tags=["health"])

    @app.on_event("startup")
    async def startup_event():
        """Initialize application on startup."""
        logger.info("Starting Rent Reminder Service", version=settings.service_version)
        app.state.start_time = time.time()

        try:
            await asyncio.to_thread(store.create_tables)
        except StorageError as e:
            # Commands report storage errors until the database is reachable
            logger.error("Tenant table setup failed", error=e.to_dict())

        if settings.reminder_enabled:
            app.state.reminder_scheduler.start()
        else:
            logger.info("Reminder scheduler disabled")

        logger.info("Service startup complete")

    @app.on_event("shutdown")
    async def shutdown_event():
        """Cleanup on shutdown."""
        logger.info("Shutting down Rent Reminder Service")
        app.state.reminder_scheduler.shutdown()
        store.engine.dispose()

    return app


def run() -> None:
    """Console entry point."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "rent_reminder.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
