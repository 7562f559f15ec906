"""
Pytest configuration and fixtures for the Rent Reminder Service.
"""
from datetime import date
from typing import Generator, Iterable, List

import pytest
from fastapi.testclient import TestClient

from rent_reminder.core.config import Settings
from rent_reminder.core.exceptions import NotificationDeliveryError
from rent_reminder.main import create_app
from rent_reminder.services.channel_client import Channel, ChannelClient
from rent_reminder.services.tenant_store import TenantStore, create_db_engine


class RecordingChannelClient(ChannelClient):
    """Channel client that records messages instead of posting them."""

    def __init__(
        self,
        webhook_url: str = "http://chat.test/webhook",
        failing_rooms: Iterable[int] = (),
    ):
        super().__init__(webhook_url=webhook_url, channel_id="general")
        self.messages: List[str] = []
        self.failing_rooms = set(failing_rooms)

    async def send(self, channel: Channel, content: str) -> None:
        for room in self.failing_rooms:
            if f"(Cuarto {room})" in content:
                raise NotificationDeliveryError(f"delivery failed for room {room}", status_code=500)
        self.messages.append(content)


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a throwaway SQLite database."""
    return Settings(
        _env_file=None,
        database_url=f"sqlite:///{tmp_path / 'tenants.db'}",
        channel_webhook_url="http://chat.test/webhook",
        channel_id="general",
        command_prefix="!",
        move_in_year=2026,
        reminder_enabled=False,
        startup_retry_attempts=1,
    )


@pytest.fixture
def store(settings: Settings) -> Generator[TenantStore, None, None]:
    """Tenant store with its table created."""
    tenant_store = TenantStore(create_db_engine(settings), startup_retry_attempts=1)
    tenant_store.create_tables()
    yield tenant_store
    tenant_store.engine.dispose()


@pytest.fixture
def make_channel_client():
    """Factory for recording channel clients with custom behaviour."""
    return RecordingChannelClient


@pytest.fixture
def channel_client() -> RecordingChannelClient:
    return RecordingChannelClient()


@pytest.fixture
def client(
    settings: Settings, store: TenantStore, channel_client: RecordingChannelClient
) -> Generator[TestClient, None, None]:
    """
    Create a test client for the FastAPI application.

    The application shares the store and channel client fixtures so tests can
    inspect both.
    """
    app = create_app(settings, store=store, channel_client=channel_client)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def api_prefix(settings: Settings) -> str:
    return settings.api_prefix


@pytest.fixture
def sample_headers() -> dict:
    """Sample request headers with correlation ID."""
    return {
        "X-Correlation-ID": "test-correlation-123",
        "Content-Type": "application/json",
    }


@pytest.fixture
def march_tenant(store: TenantStore):
    """Tenant in room 4 whose payment day is the 15th."""
    return store.add_tenant("Ana", date(2026, 3, 15), 15, 4)
