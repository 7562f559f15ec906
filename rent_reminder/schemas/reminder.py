"""
Pydantic models for reminder cycle results.
"""
from datetime import date
from typing import Optional

from pydantic import BaseModel, Field


class ReminderRunResponse(BaseModel):
    """Outcome of one reminder cycle."""

    day: date = Field(..., description="Calendar date evaluated in the reminder timezone")
    due: int = Field(..., ge=0, description="Tenants whose payment day is today")
    sent: int = Field(..., ge=0, description="Notifications delivered")
    failed: int = Field(..., ge=0, description="Notifications that could not be delivered")
    skipped: int = Field(0, ge=0, description="Tenants already notified today")
    skipped_reason: Optional[str] = Field(None, description="Why the cycle emitted nothing")
