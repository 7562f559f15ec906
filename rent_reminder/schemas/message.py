"""
Pydantic models for operator messages relayed from the chat channel.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class IncomingMessage(BaseModel):
    """Inbound chat message schema."""

    content: str = Field(..., max_length=2000, description="Raw message text")
    author: Optional[str] = Field(None, max_length=100, description="Message author")
    channel_id: Optional[str] = Field(None, max_length=100, description="Originating channel")

    @field_validator("content")
    @classmethod
    def validate_content(cls, v):
        """Collapse surrounding whitespace; empty messages are allowed and ignored."""
        return v.strip()

    model_config = {
        "json_schema_extra": {
            "example": {
                "content": "!add-tenant Ana 15/03 4",
                "author": "operator",
                "channel_id": "1234567890",
            }
        }
    }


class MessageReply(BaseModel):
    """Response model for message processing."""

    handled: bool = Field(..., description="Whether the message was a command")
    reply: Optional[str] = Field(None, description="Reply text for the chat channel")
    timestamp: datetime = Field(
        default_factory=datetime.utcnow, description="Processing timestamp"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "handled": True,
                "reply": "Inquilino Ana agregado con fecha de ingreso 15/03, día de pago el 15 y número de cuarto 4.",
                "timestamp": "2026-03-15T14:00:00Z",
            }
        }
    }
