"""
Pydantic models for tenant records returned by the tenant store.
"""
from datetime import date

from pydantic import BaseModel, ConfigDict, Field

from rent_reminder.models.database import MAX_ROOM_NUMBER


class TenantRecord(BaseModel):
    """Immutable snapshot of a stored tenant."""

    id: int = Field(..., description="System-assigned tenant identifier")
    name: str = Field(..., min_length=1, description="Tenant name")
    move_in_date: date = Field(..., description="First occupancy date")
    payment_day: int = Field(..., ge=1, le=31, description="Day of month rent is due")
    room_number: int = Field(..., gt=0, le=MAX_ROOM_NUMBER, description="Occupied room number")

    model_config = ConfigDict(from_attributes=True, frozen=True)
