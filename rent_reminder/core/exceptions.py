"""
Custom exception classes for the Rent Reminder Service.
"""
from typing import Any, Dict, Optional


class RentReminderError(Exception):
    """Base exception for tenant and reminder errors."""

    error_code = "RRS_000"

    def __init__(self, detail: str, **context):
        self.detail = detail
        self.context = context
        super().__init__(detail)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging and API responses."""
        return {
            "error": True,
            "error_code": self.error_code,
            "message": self.detail,
            "context": self.context,
        }


class ValidationError(RentReminderError):
    """Missing or malformed command arguments or tenant fields."""

    error_code = "RRS_001"

    def __init__(self, detail: str, field: Optional[str] = None, value: Optional[Any] = None, **context):
        self.field = field
        self.value = value
        if field:
            detail = f"Validation failed for field '{field}': {detail}"
        super().__init__(detail, field=field, value=value, **context)


class ConflictError(RentReminderError):
    """The room is already occupied by another tenant."""

    error_code = "RRS_002"

    def __init__(self, room_number: int, detail: Optional[str] = None, **context):
        self.room_number = room_number
        super().__init__(
            detail or f"Room {room_number} is already occupied",
            room_number=room_number,
            **context
        )


class InvalidDateError(RentReminderError):
    """Day and month do not form a calendar date."""

    error_code = "RRS_003"

    def __init__(self, day: int, month: int, year: Optional[int] = None, **context):
        self.day = day
        self.month = month
        self.year = year
        detail = f"{day:02d}/{month:02d} is not a valid calendar date"
        if year is not None:
            detail = f"{detail} in {year}"
        super().__init__(detail, day=day, month=month, year=year, **context)


class StorageError(RentReminderError):
    """The backing store is unreachable or a query failed."""

    error_code = "RRS_004"

    def __init__(self, detail: str, operation: Optional[str] = None, **context):
        self.operation = operation
        super().__init__(detail, operation=operation, **context)


class ChannelResolutionError(RentReminderError):
    """The notification destination is missing or no longer available."""

    error_code = "RRS_005"

    def __init__(self, detail: str, channel_id: Optional[str] = None, **context):
        self.channel_id = channel_id
        super().__init__(detail, channel_id=channel_id, **context)


class NotificationDeliveryError(RentReminderError):
    """A resolved channel rejected or failed to receive a notification."""

    error_code = "RRS_006"

    def __init__(self, detail: str, status_code: Optional[int] = None, **context):
        self.status_code = status_code
        super().__init__(detail, status_code=status_code, **context)
