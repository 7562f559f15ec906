"""
Daily payment-day reminders.

A single cron job fires once per day at a fixed wall-clock time in the
reminder timezone, scans every tenant and posts one notification for each
tenant whose payment day is today.
"""

import asyncio
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Set, Tuple

import pytz
import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from rent_reminder.core.exceptions import ChannelResolutionError, NotificationDeliveryError
from rent_reminder.core.logging import correlation_context, log_business_event
from rent_reminder.schemas.tenant import TenantRecord
from rent_reminder.services.channel_client import ChannelClient
from rent_reminder.services.tenant_store import TenantStore

logger = structlog.get_logger(__name__)

REMINDER_JOB_ID = "payment_day_reminders"


def reminder_message(tenant: TenantRecord) -> str:
    return f"📅 Recordatorio: Hoy es el día de pago de {tenant.name} (Cuarto {tenant.room_number})."


@dataclass
class ReminderCycleResult:
    """Outcome of one reminder cycle."""
    day: date
    due: int = 0
    sent: int = 0
    failed: int = 0
    skipped: int = 0
    skipped_reason: Optional[str] = None

    def to_dict(self):
        return {
            "day": self.day,
            "due": self.due,
            "sent": self.sent,
            "failed": self.failed,
            "skipped": self.skipped,
            "skipped_reason": self.skipped_reason,
        }


class ReminderScheduler:
    """
    Runs the daily reminder cycle.

    Nothing is remembered between fires unless ``dedupe`` is enabled, so two
    fires on the same day notify twice.
    """

    def __init__(
        self,
        store: TenantStore,
        channel_client: ChannelClient,
        timezone: str = "America/Bogota",
        hour: int = 9,
        minute: int = 0,
        dedupe: bool = False,
        misfire_grace_seconds: int = 3600,
    ):
        """
        Initialize scheduler.

        Args:
            store: Tenant store to read from
            channel_client: Destination for notifications
            timezone: Timezone that defines "today" and the fire time
            hour: Fire hour in ``timezone``
            minute: Fire minute in ``timezone``
            dedupe: Skip tenants already notified on the same calendar day
            misfire_grace_seconds: How late a missed fire may still run
        """
        self.store = store
        self.channel_client = channel_client
        self.timezone = pytz.timezone(timezone)
        self.hour = hour
        self.minute = minute
        self.dedupe = dedupe
        self.misfire_grace_seconds = misfire_grace_seconds
        self._notified: Set[Tuple[int, date]] = set()
        self._scheduler: Optional[AsyncIOScheduler] = None

        logger.info(
            "Reminder scheduler initialized",
            timezone=timezone,
            hour=hour,
            minute=minute,
            dedupe=dedupe,
        )

    def start(self) -> None:
        """Register the daily job and start the scheduler on the running loop."""
        if self._scheduler and self._scheduler.running:
            logger.warning("Reminder scheduler already running")
            return

        self._scheduler = AsyncIOScheduler(timezone=self.timezone)
        self._scheduler.add_job(
            self._scheduled_fire,
            trigger=CronTrigger(hour=self.hour, minute=self.minute, timezone=self.timezone),
            id=REMINDER_JOB_ID,
            replace_existing=True,
            coalesce=True,
            # Overlapping fires run to completion side by side
            max_instances=3,
            misfire_grace_time=self.misfire_grace_seconds,
        )
        self._scheduler.start()
        logger.info("Reminder scheduler started", next_run_time=str(self.next_run_time()))

    def shutdown(self) -> None:
        """Stop the scheduler without waiting for running cycles."""
        if self._scheduler and self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Reminder scheduler stopped")
        self._scheduler = None

    @property
    def running(self) -> bool:
        return bool(self._scheduler and self._scheduler.running)

    def next_run_time(self) -> Optional[datetime]:
        """Next scheduled fire, or None when not running."""
        if not self._scheduler:
            return None
        job = self._scheduler.get_job(REMINDER_JOB_ID)
        return job.next_run_time if job else None

    async def _scheduled_fire(self) -> None:
        try:
            await self.run_cycle()
        except Exception as e:
            # The scheduler must survive any single cycle
            logger.error("Reminder cycle failed", error=str(e), exc_info=True)

    def today(self, now: Optional[datetime] = None) -> date:
        """Current calendar date in the reminder timezone."""
        if now is None:
            return datetime.now(self.timezone).date()
        if now.tzinfo is None:
            return self.timezone.localize(now).date()
        return now.astimezone(self.timezone).date()

    async def run_cycle(self, now: Optional[datetime] = None) -> ReminderCycleResult:
        """
        Evaluate every tenant against today's day of month.

        Args:
            now: Instant to evaluate; defaults to the current time

        Returns:
            Counts of due, sent, failed and skipped notifications
        """
        with correlation_context():
            today = self.today(now)
            result = ReminderCycleResult(day=today)

            tenants = await asyncio.to_thread(self.store.list_tenants)
            due = [tenant for tenant in tenants if tenant.payment_day == today.day]
            result.due = len(due)

            logger.info(
                "Reminder cycle started",
                day=today.isoformat(),
                tenants=len(tenants),
                due=len(due),
            )

            try:
                channel = self.channel_client.resolve_channel()
            except ChannelResolutionError as e:
                logger.error("Reminder channel not found, skipping cycle", error=e.to_dict())
                result.skipped_reason = e.detail
                return result

            for tenant in due:
                key = (tenant.id, today)
                if self.dedupe and key in self._notified:
                    result.skipped += 1
                    continue

                try:
                    await self.channel_client.send(channel, reminder_message(tenant))
                except ChannelResolutionError as e:
                    logger.error("Reminder channel became unavailable, skipping cycle", error=e.to_dict())
                    result.failed = result.due - result.sent - result.skipped
                    result.skipped_reason = e.detail
                    break
                except NotificationDeliveryError as e:
                    logger.error(
                        "Failed to send reminder",
                        tenant_id=tenant.id,
                        room_number=tenant.room_number,
                        error=e.to_dict(),
                    )
                    result.failed += 1
                    continue

                result.sent += 1
                if self.dedupe:
                    self._notified.add(key)

            if self.dedupe:
                self._notified = {k for k in self._notified if k[1] == today}

            log_business_event("reminder_cycle_completed", **result.to_dict())
            return result
