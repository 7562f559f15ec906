"""
Tenant store backed by SQLAlchemy.

Holds every tenant record and enforces one tenant per room. The unique
constraint on ``room_number`` is the source of truth; the occupancy check
before an insert only avoids a round trip for the common case.
"""

from datetime import date
from typing import Callable, List, Optional

import structlog
from sqlalchemy import create_engine, delete, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from rent_reminder.core.config import Settings
from rent_reminder.core.exceptions import ConflictError, StorageError, ValidationError
from rent_reminder.core.logging import log_business_event
from rent_reminder.models.database import MAX_ROOM_NUMBER, Base, Tenant
from rent_reminder.schemas.tenant import TenantRecord

logger = structlog.get_logger(__name__)

# DB-API drivers raise OverflowError for integers outside the column range
QUERY_ERRORS = (SQLAlchemyError, OverflowError)


def create_db_engine(settings: Settings) -> Engine:
    """
    Create the SQLAlchemy engine for the configured database.

    SQLite connections are shared across worker threads, so the same-thread
    check is disabled for them.
    """
    connect_args = {}
    if settings.database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    elif settings.database_ssl_require:
        connect_args["sslmode"] = "require"

    return create_engine(
        settings.database_url,
        connect_args=connect_args,
        pool_pre_ping=True,
    )


class TenantStore:
    """
    Durable keyed collection of tenant records.

    All methods are blocking; async callers run them in a worker thread.
    """

    def __init__(self, engine: Engine, startup_retry_attempts: int = 3):
        """
        Initialize store with a database engine.

        Args:
            engine: SQLAlchemy engine
            startup_retry_attempts: Attempts for table creation at startup
        """
        self.engine = engine
        self.startup_retry_attempts = startup_retry_attempts
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    def create_tables(self) -> None:
        """Create the tenants table if it does not exist yet."""

        @retry(
            stop=stop_after_attempt(self.startup_retry_attempts),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception_type(OperationalError),
            reraise=True,
        )
        def _create():
            Base.metadata.create_all(self.engine)

        try:
            _create()
        except SQLAlchemyError as e:
            logger.error("Failed to create tenants table", error=str(e), exc_info=True)
            raise StorageError(f"Failed to create tenants table: {e}", operation="create_tables")

        logger.info("Tenants table created or already present")

    def ping(self) -> bool:
        """Check database connectivity."""
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning("Database health check failed", error=str(e))
            return False

    def is_room_occupied(
        self,
        room_number: int,
        on_error: Optional[Callable[[StorageError], None]] = None,
    ) -> bool:
        """
        Check whether a tenant already occupies the room.

        A failed lookup reports the room as occupied so that callers never
        insert on an unknown state.

        Args:
            room_number: Room to check
            on_error: Receives the StorageError when the lookup fails

        Returns:
            True if the room is taken or the lookup failed
        """
        try:
            with self._session_factory() as session:
                found = session.execute(
                    select(Tenant.id).where(Tenant.room_number == room_number).limit(1)
                ).first()
            return found is not None

        except QUERY_ERRORS as e:
            error = StorageError(f"Failed to check room {room_number}: {e}", operation="is_room_occupied")
            if on_error is not None:
                on_error(error)
            else:
                logger.error("Failed to check room occupancy", room_number=room_number, error=str(e))
            return True

    def add_tenant(
        self,
        name: str,
        move_in_date: date,
        payment_day: int,
        room_number: int,
    ) -> TenantRecord:
        """
        Insert a new tenant.

        Args:
            name: Tenant name
            move_in_date: First occupancy date
            payment_day: Day of month rent is due
            room_number: Room the tenant occupies

        Returns:
            The stored record including its assigned id

        Raises:
            ValidationError: If a field is missing or malformed
            ConflictError: If the room is already occupied
            StorageError: If the database operation fails
        """
        name = self._validate(name, move_in_date, payment_day, room_number)

        check_errors: List[StorageError] = []
        if self.is_room_occupied(room_number, on_error=check_errors.append):
            if check_errors:
                logger.error(
                    "Occupancy check failed, tenant not added",
                    room_number=room_number,
                    error=check_errors[0].detail,
                )
                raise check_errors[0]
            raise ConflictError(room_number)

        tenant = Tenant(
            name=name,
            move_in_date=move_in_date,
            payment_day=payment_day,
            room_number=room_number,
        )

        try:
            with self._session_factory() as session, session.begin():
                session.add(tenant)
        except IntegrityError:
            # Another insert for the same room committed after our check
            logger.warning("Concurrent insert rejected by unique constraint", room_number=room_number)
            raise ConflictError(room_number)
        except QUERY_ERRORS as e:
            logger.error("Failed to add tenant", room_number=room_number, error=str(e), exc_info=True)
            raise StorageError(f"Failed to add tenant: {e}", operation="add_tenant")

        record = TenantRecord.model_validate(tenant)

        log_business_event(
            "tenant_added",
            tenant_id=record.id,
            room_number=record.room_number,
            payment_day=record.payment_day,
        )
        return record

    def remove_tenant(self, room_number: int) -> bool:
        """
        Delete the tenant occupying a room.

        Returns:
            True if a tenant was removed, False if the room was empty

        Raises:
            StorageError: If the database operation fails
        """
        try:
            with self._session_factory() as session, session.begin():
                result = session.execute(delete(Tenant).where(Tenant.room_number == room_number))
        except QUERY_ERRORS as e:
            logger.error("Failed to remove tenant", room_number=room_number, error=str(e), exc_info=True)
            raise StorageError(f"Failed to remove tenant: {e}", operation="remove_tenant")

        removed = result.rowcount > 0
        if removed:
            log_business_event("tenant_removed", room_number=room_number)
        else:
            logger.info("No tenant to remove", room_number=room_number)
        return removed

    def list_tenants(self) -> List[TenantRecord]:
        """
        Get all tenants, in no particular order.

        Read failures are logged and produce an empty list.
        """
        try:
            with self._session_factory() as session:
                rows = session.execute(select(Tenant)).scalars().all()
                return [TenantRecord.model_validate(row) for row in rows]
        except SQLAlchemyError as e:
            logger.error("Failed to list tenants", error=str(e), exc_info=True)
            return []

    @staticmethod
    def _validate(name, move_in_date, payment_day, room_number) -> str:
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("name cannot be empty", field="name", value=name)
        if not isinstance(move_in_date, date):
            raise ValidationError("move-in date is required", field="move_in_date", value=move_in_date)
        if isinstance(payment_day, bool) or not isinstance(payment_day, int) or not 1 <= payment_day <= 31:
            raise ValidationError("payment day must be between 1 and 31", field="payment_day", value=payment_day)
        if (
            isinstance(room_number, bool)
            or not isinstance(room_number, int)
            or not 0 < room_number <= MAX_ROOM_NUMBER
        ):
            raise ValidationError(
                f"room number must be between 1 and {MAX_ROOM_NUMBER}", field="room_number", value=room_number
            )
        return name.strip()
