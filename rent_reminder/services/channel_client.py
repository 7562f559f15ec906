"""
Chat channel client for posting reminder notifications.
"""
from dataclasses import dataclass
from typing import Optional

import httpx
import structlog

from rent_reminder.core.exceptions import ChannelResolutionError, NotificationDeliveryError

logger = structlog.get_logger(__name__)

# Statuses meaning the webhook is gone or no longer accepts our posts
UNRESOLVABLE_STATUSES = {401, 403, 404}


@dataclass(frozen=True)
class Channel:
    """Resolved notification destination."""
    webhook_url: str
    channel_id: Optional[str] = None


class ChannelClient:
    """Client for the chat channel webhook that receives reminders."""

    def __init__(
        self,
        webhook_url: Optional[str],
        channel_id: Optional[str] = None,
        timeout: float = 10.0,
    ):
        self.webhook_url = webhook_url
        self.channel_id = channel_id
        self.timeout = timeout

    def resolve_channel(self) -> Channel:
        """
        Resolve the configured output channel.

        Raises:
            ChannelResolutionError: If no webhook is configured
        """
        if not self.webhook_url or not self.webhook_url.strip():
            raise ChannelResolutionError(
                "No channel webhook configured", channel_id=self.channel_id
            )
        return Channel(webhook_url=self.webhook_url.strip(), channel_id=self.channel_id)

    async def send(self, channel: Channel, content: str) -> None:
        """
        Post a message to the channel.

        Args:
            channel: Destination returned by resolve_channel
            content: Message text

        Raises:
            ChannelResolutionError: If the webhook no longer exists or refuses access
            NotificationDeliveryError: For any other delivery failure
        """
        if not content or not content.strip():
            raise ValueError("Message cannot be empty")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                logger.info(
                    "Sending channel message",
                    channel_id=channel.channel_id,
                    message_length=len(content),
                )

                response = await client.post(channel.webhook_url, json={"content": content})
                response.raise_for_status()

        except httpx.TimeoutException as e:
            logger.error(
                "Timeout sending channel message",
                channel_id=channel.channel_id,
                timeout=self.timeout,
                error=str(e),
            )
            raise NotificationDeliveryError(f"Request timeout after {self.timeout} seconds")

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error(
                "HTTP error from chat channel",
                channel_id=channel.channel_id,
                status_code=status_code,
                error=str(e),
            )
            if status_code in UNRESOLVABLE_STATUSES:
                raise ChannelResolutionError(
                    f"Channel webhook rejected the message: {status_code}",
                    channel_id=channel.channel_id,
                    status_code=status_code,
                )
            raise NotificationDeliveryError(
                f"Channel returned status {status_code}", status_code=status_code
            )

        except httpx.HTTPError as e:
            logger.error(
                "Connection error to chat channel",
                channel_id=channel.channel_id,
                error=str(e),
            )
            raise NotificationDeliveryError(f"Connection error: {str(e)}")

        logger.info("Channel message sent", channel_id=channel.channel_id)
