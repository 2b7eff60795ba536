# services/store.py
"""
Persistence for contacts, chats and messages.

Every function opens its own session and returns detached, fully loaded
records. Lookups and deletes return None when the id does not resolve;
uniqueness violations surface as Conflict, other driver failures as
InternalError.
"""
import logging
from contextlib import contextmanager
from typing import List, Optional, Sequence
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import select, col
from services.models_db import Contact, Chat, Message, utcnow
from services.errors import Conflict, InternalError
from db import get_session

logger = logging.getLogger(__name__)


@contextmanager
def _session(action: str):
    """Session for reads and deletes; driver failures become InternalError."""
    try:
        with get_session() as session:
            yield session
    except SQLAlchemyError as e:
        logger.error(f"Failed to {action}: {e}")
        raise InternalError(f"Failed to {action}", str(e))


def _persist(record, conflict: Conflict):
    """Insert or update a record, stamping updated_at."""
    record.updated_at = utcnow()
    try:
        with get_session() as session:
            session.add(record)
            session.commit()
            session.refresh(record)
            return record
    except IntegrityError as e:
        logger.warning(f"Uniqueness violation on {type(record).__name__}: {e.orig}")
        raise conflict
    except SQLAlchemyError as e:
        logger.error(f"Failed to save {type(record).__name__} {record.id}: {e}")
        raise InternalError(f"Failed to save {type(record).__name__.lower()}", str(e))


def _get(model, record_id: str):
    with _session(f"load {model.__name__.lower()}") as session:
        return session.get(model, record_id)


def _delete(model, record_id: str):
    with _session(f"delete {model.__name__.lower()}") as session:
        record = session.get(model, record_id)
        if not record:
            return None
        session.delete(record)
        session.commit()
        return record


# ---- Contacts ----

def create_contact(contact: Contact) -> Contact:
    return _persist(contact, Conflict("Email already registered", {"email": contact.email}))

def save_contact(contact: Contact) -> Contact:
    return _persist(contact, Conflict("Email already registered", {"email": contact.email}))

def get_contact(contact_id: str) -> Optional[Contact]:
    return _get(Contact, contact_id)

def find_contact_by_email(email: str) -> Optional[Contact]:
    with _session("look up contact by email") as session:
        return session.exec(select(Contact).where(Contact.email == email)).first()

def get_contacts_by_ids(contact_ids: Sequence[str]) -> dict:
    if not contact_ids:
        return {}
    with _session("load contacts") as session:
        rows = session.exec(select(Contact).where(col(Contact.id).in_(list(contact_ids)))).all()
        return {c.id: c for c in rows}

def list_contacts() -> List[Contact]:
    with _session("list contacts") as session:
        return list(session.exec(select(Contact).order_by(col(Contact.created_at).desc())).all())

def delete_contact(contact_id: str) -> Optional[Contact]:
    return _delete(Contact, contact_id)


# ---- Chats ----

def create_chat(chat: Chat) -> Chat:
    return _persist(chat, Conflict("Chat already exists for contact", {"contactId": chat.contact_id}))

def save_chat(chat: Chat) -> Chat:
    return _persist(chat, Conflict("Chat already exists for contact", {"contactId": chat.contact_id}))

def get_chat(chat_id: str) -> Optional[Chat]:
    return _get(Chat, chat_id)

def find_chat_by_contact(contact_id: str) -> Optional[Chat]:
    with _session("look up chat by contact") as session:
        return session.exec(select(Chat).where(Chat.contact_id == contact_id)).first()

def list_chats() -> List[Chat]:
    with _session("list chats") as session:
        return list(session.exec(select(Chat).order_by(col(Chat.updated_at).desc())).all())

def delete_chat(chat_id: str) -> Optional[Chat]:
    # Messages are left in place
    return _delete(Chat, chat_id)


# ---- Messages ----

def create_message(message: Message) -> Message:
    return _persist(message, Conflict("Message already exists", {"id": message.id}))

def get_message(message_id: str) -> Optional[Message]:
    return _get(Message, message_id)

def get_messages_by_ids(message_ids: Sequence[str]) -> dict:
    if not message_ids:
        return {}
    with _session("load messages") as session:
        rows = session.exec(select(Message).where(col(Message.id).in_(list(message_ids)))).all()
        return {m.id: m for m in rows}

def list_messages_by_chat(chat_id: str) -> List[Message]:
    with _session("list messages") as session:
        stmt = select(Message).where(Message.chat_id == chat_id).order_by(col(Message.created_at).asc())
        return list(session.exec(stmt).all())

def recent_messages_by_chat(chat_id: str, limit: int = 50) -> List[Message]:
    """Newest `limit` messages of a chat, newest first."""
    with _session("list recent messages") as session:
        stmt = (
            select(Message)
            .where(Message.chat_id == chat_id)
            .order_by(col(Message.created_at).desc())
            .limit(limit)
        )
        return list(session.exec(stmt).all())
