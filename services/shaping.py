# services/shaping.py
from datetime import datetime, timezone
from typing import Dict, List, Optional
from services.models_db import Contact, Chat, Message
from services import store

RECENT_MESSAGES_LIMIT = 50


def iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    # Some drivers hand back naive values; those are already UTC
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec="microseconds") + "Z"


def contact_to_dict(c: Contact) -> Dict:
    return {
        "id": c.id,
        "name": c.name,
        "email": c.email,
        "phone": c.phone,
        "chatId": c.chat_id,
        "createdAt": iso(c.created_at),
        "updatedAt": iso(c.updated_at),
    }


def message_to_dict(m: Message) -> Dict:
    return {
        "id": m.id,
        "chatId": m.chat_id,
        "content": m.content,
        "isContactMessage": m.is_contact_message,
        "timestamp": iso(m.timestamp),
        "createdAt": iso(m.created_at),
        "updatedAt": iso(m.updated_at),
    }


def chat_to_dict(chat: Chat) -> Dict:
    """Raw chat record, references left as ids."""
    return {
        "id": chat.id,
        "contactId": chat.contact_id,
        "messageIds": list(chat.message_ids or []),
        "lastMessage": chat.last_message,
        "unreadCount": chat.unread_count,
        "isArchived": chat.is_archived,
        "createdAt": iso(chat.created_at),
        "updatedAt": iso(chat.updated_at),
    }


def _with_contact(chat: Chat, contact: Optional[Contact]) -> Dict:
    data = chat_to_dict(chat)
    del data["contactId"]
    data["contact"] = contact_to_dict(contact) if contact else None
    return data


def chat_list(chats: List[Chat]) -> List[Dict]:
    """Chats with contact and lastMessage resolved, batched per listing."""
    contacts = store.get_contacts_by_ids({c.contact_id for c in chats})
    last_messages = store.get_messages_by_ids({c.last_message for c in chats if c.last_message})
    shaped = []
    for chat in chats:
        data = _with_contact(chat, contacts.get(chat.contact_id))
        last = last_messages.get(chat.last_message) if chat.last_message else None
        data["lastMessage"] = message_to_dict(last) if last else None
        shaped.append(data)
    return shaped


def chat_detail(chat: Chat) -> Dict:
    """
    Single chat view: contact and lastMessage resolved, plus the most recent
    messages (selected newest first, returned in chronological order).
    """
    data = _with_contact(chat, store.get_contact(chat.contact_id))
    recent = store.recent_messages_by_chat(chat.id, RECENT_MESSAGES_LIMIT)
    data["messages"] = [message_to_dict(m) for m in reversed(recent)]
    last = next((m for m in recent if m.id == chat.last_message), None)
    if last is None and chat.last_message:
        last = store.get_message(chat.last_message)
    data["lastMessage"] = message_to_dict(last) if last else None
    return data
