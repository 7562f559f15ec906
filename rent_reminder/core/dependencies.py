"""
Dependency injection for FastAPI application.

Components are built once at startup and kept on ``app.state``; these
functions hand them to request handlers.
"""

from fastapi import Request

from rent_reminder.core.config import Settings
from rent_reminder.services.command_service import CommandInterpreter
from rent_reminder.services.reminder_scheduler import ReminderScheduler
from rent_reminder.services.tenant_store import TenantStore


def get_app_settings(request: Request) -> Settings:
    """Get settings the application was created with."""
    return request.app.state.settings


def get_tenant_store(request: Request) -> TenantStore:
    """Get the shared tenant store."""
    return request.app.state.tenant_store


def get_command_interpreter(request: Request) -> CommandInterpreter:
    """Get the command interpreter."""
    return request.app.state.command_interpreter


def get_reminder_scheduler(request: Request) -> ReminderScheduler:
    """Get the reminder scheduler."""
    return request.app.state.reminder_scheduler
