# services/contacts_service.py
import logging
from typing import Dict, List
from models import ContactInput
from services.models_db import Contact
from services.errors import Conflict, NotFound
from services.shaping import contact_to_dict
from services.chat_sync import provision_chat
from services import store

logger = logging.getLogger(__name__)


def _ensure_email_free(email: str, contact_id: str = None):
    existing = store.find_contact_by_email(email)
    if existing and existing.id != contact_id:
        raise Conflict("Email already registered", {"email": email})


def _require(contact_id: str) -> Contact:
    contact = store.get_contact(contact_id)
    if not contact:
        raise NotFound("Contact not found", {"id": contact_id})
    return contact


def create_contact(data: ContactInput) -> Dict:
    _ensure_email_free(data.email)
    contact = store.create_contact(Contact(name=data.name, email=data.email, phone=data.phone))
    logger.info(f"Created contact {contact.id}")
    provision_chat(contact)
    return contact_to_dict(contact)


def list_contacts() -> List[Dict]:
    return [contact_to_dict(c) for c in store.list_contacts()]


def get_contact(contact_id: str) -> Dict:
    return contact_to_dict(_require(contact_id))


def update_contact(contact_id: str, data: ContactInput) -> Dict:
    contact = _require(contact_id)
    _ensure_email_free(data.email, contact_id)
    contact.name = data.name
    contact.email = data.email
    contact.phone = data.phone
    return contact_to_dict(store.save_contact(contact))


def delete_contact(contact_id: str) -> Dict:
    # The contact's chat is left untouched
    contact = store.delete_contact(contact_id)
    if not contact:
        raise NotFound("Contact not found", {"id": contact_id})
    logger.info(f"Deleted contact {contact_id}")
    return contact_to_dict(contact)
