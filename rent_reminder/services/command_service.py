"""
Command interpreter for operator messages.

Parses each message into an intent, runs it against the tenant store and
renders the reply text for the chat channel.
"""
import asyncio
from datetime import datetime
from typing import Callable, List, Optional

import structlog

from rent_reminder.core.exceptions import (
    ConflictError,
    InvalidDateError,
    StorageError,
    ValidationError,
)
from rent_reminder.core.logging import correlation_context
from rent_reminder.schemas.tenant import TenantRecord
from rent_reminder.services.tenant_store import TenantStore
from rent_reminder.utils.command_parser import (
    AddTenantIntent,
    CommandType,
    InvalidIntent,
    ListTenantsIntent,
    RemoveTenantIntent,
    UnrecognizedIntent,
    parse_command,
    usage_for,
)
from rent_reminder.utils.payment_day import compute_payment_day, format_spanish_date

logger = structlog.get_logger(__name__)

ADD_ERROR_REPLY = "Error al agregar el inquilino."
REMOVE_ERROR_REPLY = "Error al eliminar el inquilino."
NO_TENANTS_REPLY = "No hay inquilinos registrados."
LIST_HEADER = "**Lista de inquilinos:**"


class CommandInterpreter:
    """Stateless dispatcher from operator text to tenant store operations."""

    def __init__(
        self,
        store: TenantStore,
        move_in_timezone: str = "America/Lima",
        move_in_year: Optional[int] = None,
        prefix: str = "!",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize interpreter.

        Args:
            store: Tenant store shared with the reminder scheduler
            move_in_timezone: Reference timezone for move-in dates
            move_in_year: Fixed move-in year; current year when None
            prefix: Characters that precede every command token
            clock: Returns the current instant; defaults to the wall clock
        """
        self.store = store
        self.move_in_timezone = move_in_timezone
        self.move_in_year = move_in_year
        self.prefix = prefix
        self.clock = clock

    async def handle(self, text: str) -> Optional[str]:
        """
        Handle one operator message.

        Returns:
            Reply text, or None when the message is not a command
        """
        intent = parse_command(text, self.prefix)

        if isinstance(intent, UnrecognizedIntent):
            return None

        if isinstance(intent, InvalidIntent):
            logger.info("Rejected malformed command", command=intent.command.value, reason=intent.reason)
            return intent.usage

        if isinstance(intent, AddTenantIntent):
            with correlation_context(room_number=intent.room_number):
                return await self._add_tenant(intent)

        if isinstance(intent, RemoveTenantIntent):
            with correlation_context(room_number=intent.room_number):
                return await self._remove_tenant(intent)

        if isinstance(intent, ListTenantsIntent):
            return await self._list_tenants()

        raise TypeError(f"Unhandled intent: {intent!r}")

    async def _add_tenant(self, intent: AddTenantIntent) -> str:
        try:
            result = compute_payment_day(
                intent.day,
                intent.month,
                self.move_in_timezone,
                year=self.move_in_year,
                now=self.clock() if self.clock else None,
            )
        except InvalidDateError as e:
            logger.info("Rejected invalid move-in date", raw_date=intent.raw_date, error=e.detail)
            return f"La fecha de ingreso {intent.raw_date} no es una fecha válida."

        try:
            tenant = await asyncio.to_thread(
                self.store.add_tenant,
                intent.name,
                result.move_in_date,
                result.payment_day,
                intent.room_number,
            )
        except ConflictError:
            return f"El cuarto {intent.room_number} ya está ocupado."
        except ValidationError as e:
            logger.info("Tenant rejected by store validation", error=e.detail)
            return usage_for(CommandType.ADD_TENANT, self.prefix)
        except StorageError as e:
            logger.error("Error adding tenant", error=e.to_dict())
            return ADD_ERROR_REPLY

        return (
            f"Inquilino {tenant.name} agregado con fecha de ingreso {intent.raw_date}, "
            f"día de pago el {tenant.payment_day} y número de cuarto {tenant.room_number}."
        )

    async def _remove_tenant(self, intent: RemoveTenantIntent) -> str:
        try:
            removed = await asyncio.to_thread(self.store.remove_tenant, intent.room_number)
        except StorageError as e:
            logger.error("Error removing tenant", error=e.to_dict())
            return REMOVE_ERROR_REPLY

        if removed:
            return f"Inquilino del cuarto {intent.room_number} eliminado correctamente."
        return f"No se encontró un inquilino en el cuarto {intent.room_number}."

    async def _list_tenants(self) -> str:
        tenants = await asyncio.to_thread(self.store.list_tenants)
        if not tenants:
            return NO_TENANTS_REPLY
        return format_tenant_list(tenants)


def format_tenant_list(tenants: List[TenantRecord]) -> str:
    """Render the tenant list reply, one line per tenant."""
    lines = [LIST_HEADER]
    for tenant in tenants:
        lines.append(
            f"- {tenant.name} (Cuarto {tenant.room_number}), día de pago: {tenant.payment_day} , "
            f"fecha de ingreso: {format_spanish_date(tenant.move_in_date)}"
        )
    return "\n".join(lines)
