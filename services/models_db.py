# services/models_db.py
import uuid
from datetime import datetime, timezone
from typing import Optional, List
from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Contact(SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)
    name: str
    email: str = Field(unique=True, index=True)
    phone: str
    # Null while chat provisioning is pending
    chat_id: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Chat(SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)
    contact_id: str = Field(unique=True, index=True)
    # Insertion order; last element is always last_message
    message_ids: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    last_message: Optional[str] = Field(default=None)
    unread_count: int = Field(default=0, ge=0)
    is_archived: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow, index=True)


class Message(SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)
    chat_id: str = Field(index=True)
    content: str
    is_contact_message: bool
    timestamp: datetime = Field(default_factory=utcnow)
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)
