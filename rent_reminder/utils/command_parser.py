"""
Operator command parsing.

Turns a raw chat line into a typed intent. Parsing never touches the tenant
store; anything that is not a recognised command becomes an
``UnrecognizedIntent`` and is ignored by the dispatcher.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Union

from rent_reminder.core.exceptions import ValidationError
from rent_reminder.models.database import MAX_ROOM_NUMBER
from rent_reminder.utils.payment_day import parse_day_month


class CommandType(Enum):
    """Enumeration of operator commands."""
    ADD_TENANT = "add-tenant"
    REMOVE_TENANT = "remove-tenant"
    LIST_TENANTS = "list-tenants"


COMMAND_TOKENS: Dict[str, CommandType] = {
    "add-tenant": CommandType.ADD_TENANT,
    "remove-tenant": CommandType.REMOVE_TENANT,
    "list-tenants": CommandType.LIST_TENANTS,
    # Spanish aliases used by existing operators
    "agregar-inquilino": CommandType.ADD_TENANT,
    "eliminar-inquilino": CommandType.REMOVE_TENANT,
    "ver-inquilinos": CommandType.LIST_TENANTS,
}


@dataclass(frozen=True)
class AddTenantIntent:
    name: str
    day: int
    month: int
    raw_date: str
    room_number: int


@dataclass(frozen=True)
class RemoveTenantIntent:
    room_number: int


@dataclass(frozen=True)
class ListTenantsIntent:
    pass


@dataclass(frozen=True)
class InvalidIntent:
    """A recognised command with missing or malformed arguments."""
    command: CommandType
    usage: str
    reason: str = ""


@dataclass(frozen=True)
class UnrecognizedIntent:
    text: str


Intent = Union[
    AddTenantIntent, RemoveTenantIntent, ListTenantsIntent, InvalidIntent, UnrecognizedIntent
]


def usage_for(command: CommandType, prefix: str = "!") -> str:
    """Usage hint naming the exact command syntax."""
    if command is CommandType.ADD_TENANT:
        return f"Formato incorrecto. Usa: {prefix}add-tenant <nombre> <fecha_ingreso DD/MM> <número de cuarto>"
    if command is CommandType.REMOVE_TENANT:
        return f"Formato incorrecto. Usa: {prefix}remove-tenant <número de cuarto>"
    return f"Formato incorrecto. Usa: {prefix}list-tenants"


def parse_room_number(text: str) -> int:
    """
    Parse a positive room number that fits the tenants table.

    Raises:
        ValidationError: If the text is not an integer from 1 to MAX_ROOM_NUMBER
    """
    if not text or not (text.isascii() and text.isdigit()):
        raise ValidationError("room number must be a positive integer", field="room_number", value=text)
    room_number = int(text)
    if not 0 < room_number <= MAX_ROOM_NUMBER:
        raise ValidationError(
            f"room number must be between 1 and {MAX_ROOM_NUMBER}", field="room_number", value=text
        )
    return room_number


def parse_command(text: str, prefix: str = "!") -> Intent:
    """
    Parse one operator message.

    Args:
        text: Raw message content
        prefix: Characters that precede every command token

    Returns:
        The typed intent for the message
    """
    tokens = (text or "").split()
    if not tokens or not tokens[0].startswith(prefix):
        return UnrecognizedIntent(text=text or "")

    command = COMMAND_TOKENS.get(tokens[0][len(prefix):])
    if command is None:
        return UnrecognizedIntent(text=text)

    args = tokens[1:]
    try:
        if command is CommandType.ADD_TENANT:
            return _parse_add(args)
        if command is CommandType.REMOVE_TENANT:
            if not args:
                raise ValidationError("missing room number", field="room_number")
            return RemoveTenantIntent(room_number=parse_room_number(args[0]))
        return ListTenantsIntent()
    except ValidationError as e:
        return InvalidIntent(command=command, usage=usage_for(command, prefix), reason=e.detail)


def _parse_add(args) -> AddTenantIntent:
    if len(args) < 3:
        raise ValidationError("expected name, move-in date and room number")

    # Names may contain spaces; date and room are always the last two tokens
    name = " ".join(args[:-2])
    raw_date = args[-2]
    day, month = parse_day_month(raw_date)
    room_number = parse_room_number(args[-1])

    return AddTenantIntent(
        name=name,
        day=day,
        month=month,
        raw_date=raw_date,
        room_number=room_number,
    )
