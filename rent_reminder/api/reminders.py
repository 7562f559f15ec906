"""
Manual trigger for the reminder cycle.
"""
from fastapi import APIRouter, Depends

from rent_reminder.core.dependencies import get_reminder_scheduler
from rent_reminder.core.logging import get_logger
from rent_reminder.schemas.reminder import ReminderRunResponse
from rent_reminder.services.reminder_scheduler import ReminderScheduler

logger = get_logger(__name__)
router = APIRouter()


@router.post("/reminders/run", response_model=ReminderRunResponse)
async def run_reminders(scheduler: ReminderScheduler = Depends(get_reminder_scheduler)):
    """Run one reminder cycle now, in addition to the daily schedule."""
    logger.info("Manual reminder cycle requested")
    result = await scheduler.run_cycle()
    return ReminderRunResponse(**result.to_dict())
