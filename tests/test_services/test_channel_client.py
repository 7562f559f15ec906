"""
Tests for the chat channel client.
"""
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from rent_reminder.core.exceptions import ChannelResolutionError, NotificationDeliveryError
from rent_reminder.services.channel_client import Channel, ChannelClient


@pytest.fixture
def channel_client():
    return ChannelClient(webhook_url="http://chat.test/webhook", channel_id="general", timeout=5.0)


@pytest.fixture
def channel():
    return Channel(webhook_url="http://chat.test/webhook", channel_id="general")


def _mock_http_client(mock_client_class, response=None, side_effect=None):
    mock_client = AsyncMock()
    mock_client_class.return_value.__aenter__.return_value = mock_client
    if side_effect is not None:
        mock_client.post.side_effect = side_effect
    else:
        mock_client.post.return_value = response
    return mock_client


def _status_response(status_code):
    mock_response = MagicMock()
    mock_response.status_code = status_code
    if status_code >= 400:
        mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
            f"{status_code} error", request=MagicMock(), response=mock_response
        )
    return mock_response


class TestResolveChannel:
    """Test cases for channel resolution."""

    def test_resolves_configured_webhook(self, channel_client):
        resolved = channel_client.resolve_channel()

        assert resolved == Channel(webhook_url="http://chat.test/webhook", channel_id="general")

    @pytest.mark.parametrize("webhook_url", [None, "", "   "])
    def test_missing_webhook(self, webhook_url):
        client = ChannelClient(webhook_url=webhook_url, channel_id="general")

        with pytest.raises(ChannelResolutionError) as exc_info:
            client.resolve_channel()

        assert exc_info.value.channel_id == "general"


class TestSend:
    """Test cases for posting messages."""

    @pytest.mark.asyncio
    async def test_send_success(self, channel_client, channel):
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = _mock_http_client(mock_client_class, response=_status_response(204))

            await channel_client.send(channel, "📅 Recordatorio")

            mock_client.post.assert_called_once_with(
                "http://chat.test/webhook", json={"content": "📅 Recordatorio"}
            )
            mock_client_class.assert_called_once_with(timeout=5.0)

    @pytest.mark.asyncio
    async def test_empty_message(self, channel_client, channel):
        with pytest.raises(ValueError, match="Message cannot be empty"):
            await channel_client.send(channel, "  ")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [401, 403, 404])
    async def test_gone_channel(self, channel_client, channel, status_code):
        with patch("httpx.AsyncClient") as mock_client_class:
            _mock_http_client(mock_client_class, response=_status_response(status_code))

            with pytest.raises(ChannelResolutionError):
                await channel_client.send(channel, "hola")

    @pytest.mark.asyncio
    async def test_server_error(self, channel_client, channel):
        with patch("httpx.AsyncClient") as mock_client_class:
            _mock_http_client(mock_client_class, response=_status_response(500))

            with pytest.raises(NotificationDeliveryError) as exc_info:
                await channel_client.send(channel, "hola")

            assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_timeout(self, channel_client, channel):
        with patch("httpx.AsyncClient") as mock_client_class:
            _mock_http_client(mock_client_class, side_effect=httpx.TimeoutException("timed out"))

            with pytest.raises(NotificationDeliveryError, match="Request timeout after 5.0 seconds"):
                await channel_client.send(channel, "hola")

    @pytest.mark.asyncio
    async def test_connection_error(self, channel_client, channel):
        with patch("httpx.AsyncClient") as mock_client_class:
            _mock_http_client(mock_client_class, side_effect=httpx.ConnectError("refused"))

            with pytest.raises(NotificationDeliveryError, match="Connection error"):
                await channel_client.send(channel, "hola")
