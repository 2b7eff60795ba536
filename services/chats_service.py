# services/chats_service.py
import logging
from typing import Dict, List
from models import ChatInput
from services.models_db import Chat
from services.errors import Conflict, NotFound
from services.shaping import chat_detail, chat_list, chat_to_dict
from services.chat_sync import link_chat, mark_read
from services import store

logger = logging.getLogger(__name__)


def create_chat(data: ChatInput) -> Dict:
    if not store.get_contact(data.contact_id):
        raise NotFound("Contact not found", {"contactId": data.contact_id})
    if store.find_chat_by_contact(data.contact_id):
        raise Conflict("Chat already exists for contact", {"contactId": data.contact_id})

    message_ids = list(data.message_ids)
    chat = store.create_chat(Chat(
        contact_id=data.contact_id,
        message_ids=message_ids,
        last_message=message_ids[-1] if message_ids else None,
    ))
    link_chat(chat)
    logger.info(f"Created chat {chat.id} for contact {data.contact_id}")
    return chat_to_dict(chat)


def list_chats() -> List[Dict]:
    return chat_list(store.list_chats())


def open_chat(chat_id: str) -> Dict:
    """
    Chat detail with its recent messages. Marks the chat as read: the
    response carries the unread count from before the reset.
    """
    chat = store.get_chat(chat_id)
    if not chat:
        raise NotFound("Chat not found", {"id": chat_id})
    detail = chat_detail(chat)
    mark_read(chat)
    return detail


def delete_chat(chat_id: str) -> Dict:
    chat = store.delete_chat(chat_id)
    if not chat:
        raise NotFound("Chat not found", {"id": chat_id})
    logger.info(f"Deleted chat {chat_id}")
    return chat_to_dict(chat)
