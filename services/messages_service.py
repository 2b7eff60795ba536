# services/messages_service.py
import logging
from typing import Dict
from models import MessageInput
from services.models_db import Message, utcnow
from services.errors import NotFound
from services.shaping import message_to_dict
from services.chat_sync import record_message, mark_read
from services import store

logger = logging.getLogger(__name__)


def send_message(data: MessageInput) -> Dict:
    chat = store.get_chat(data.chat_id)
    if not chat:
        raise NotFound("Chat not found", {"chatId": data.chat_id})

    message = store.create_message(Message(
        chat_id=chat.id,
        content=data.content,
        is_contact_message=data.is_contact_message,
        timestamp=data.timestamp or utcnow(),
    ))
    record_message(chat, message)
    logger.debug(f"Stored message {message.id} in chat {chat.id}")
    return message_to_dict(message)


def read_chat_messages(chat_id: str) -> Dict:
    """All messages of a chat, oldest first. Marks the chat as read."""
    chat = store.get_chat(chat_id)
    if not chat:
        raise NotFound("Chat not found", {"chatId": chat_id})
    messages = store.list_messages_by_chat(chat_id)
    mark_read(chat)
    return {
        "count": len(messages),
        "chatId": chat_id,
        "data": [message_to_dict(m) for m in messages],
    }
