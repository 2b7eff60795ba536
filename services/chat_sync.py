# services/chat_sync.py
"""
Side effects that keep contacts, chats and messages consistent.

None of these sequences run in a transaction. A failure after the primary
write is logged and left in place:
- a contact whose chat could not be created keeps chat_id=None
  (provisioning pending);
- a message whose chat could not be updated exists but is missing from the
  chat's message_ids and counters.
"""
import logging
from typing import Optional
from services.models_db import Contact, Chat, Message
from services.errors import ApiError
from services import store

logger = logging.getLogger(__name__)


def provision_chat(contact: Contact) -> Optional[Chat]:
    """Create the contact's chat and write its id back onto the contact."""
    if contact.chat_id:
        return None
    try:
        chat = store.find_chat_by_contact(contact.id)
        if chat is None:
            chat = store.create_chat(Chat(contact_id=contact.id))
        contact.chat_id = chat.id
        store.save_contact(contact)
        logger.info(f"Provisioned chat {chat.id} for contact {contact.id}")
        return chat
    except ApiError as e:
        logger.error(f"Chat provisioning failed for contact {contact.id}: {e.error} ({e.details})")
        contact.chat_id = None
        return None


def link_chat(chat: Chat) -> None:
    """Point a contact without a chat at an explicitly created chat."""
    try:
        contact = store.get_contact(chat.contact_id)
        if contact is None or contact.chat_id:
            return
        contact.chat_id = chat.id
        store.save_contact(contact)
    except ApiError as e:
        logger.error(f"Failed to link chat {chat.id} to contact {chat.contact_id}: {e.error}")


def record_message(chat: Chat, message: Message) -> bool:
    """Append a stored message to its chat and bump the unread counter."""
    chat.message_ids = list(chat.message_ids or []) + [message.id]
    chat.last_message = message.id
    chat.unread_count = (chat.unread_count or 0) + 1
    try:
        store.save_chat(chat)
        return True
    except ApiError as e:
        logger.error(f"Message {message.id} saved but chat {chat.id} not updated: {e.error}")
        return False


def mark_read(chat: Chat) -> int:
    """Reset unread_count; returns the count as it was before the reset."""
    previous = chat.unread_count
    if previous > 0:
        chat.unread_count = 0
        store.save_chat(chat)
    return previous
