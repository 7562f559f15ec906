"""
Inbound operator message endpoint.

The chat relay forwards every channel message here and posts back the
returned reply, if any.
"""
from fastapi import APIRouter, Depends, HTTPException, status

from rent_reminder.core.dependencies import get_command_interpreter
from rent_reminder.core.logging import get_logger
from rent_reminder.schemas.message import IncomingMessage, MessageReply
from rent_reminder.services.command_service import CommandInterpreter

logger = get_logger(__name__)
router = APIRouter()


@router.post("/messages", response_model=MessageReply)
async def receive_message(
    message: IncomingMessage,
    interpreter: CommandInterpreter = Depends(get_command_interpreter),
):
    """Interpret one operator message and return the reply text."""
    try:
        reply = await interpreter.handle(message.content)
    except Exception as e:
        logger.error(
            "Failed to process message",
            author=message.author,
            channel_id=message.channel_id,
            error=str(e),
            exc_info=True,
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )

    if reply is not None:
        logger.info("Command handled", author=message.author, channel_id=message.channel_id)

    return MessageReply(handled=reply is not None, reply=reply)
