import random
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar
from pydantic import BaseModel, ConfigDict, EmailStr, Field, StrictBool, ValidationError, field_validator
from services.errors import ValidationFailed

PHONE_DIGITS = 9

T = TypeVar("T", bound=BaseModel)


def _coin_flip() -> bool:
    # Placeholder sender attribution: callers that care must send isContactMessage
    return random.random() > 0.5


def to_utc(value: datetime) -> datetime:
    """Normalize to aware UTC; naive input is taken to already be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class ContactInput(_Payload):
    name: str = Field(min_length=2)
    email: EmailStr
    phone: str = Field(pattern=rf"^\d{{{PHONE_DIGITS}}}$")

    @field_validator("email", mode="before")
    @classmethod
    def _lower_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class ChatInput(_Payload):
    contact_id: str = Field(alias="contactId", min_length=1)
    message_ids: List[str] = Field(default_factory=list, alias="messageIds")


class MessageInput(_Payload):
    chat_id: str = Field(alias="chatId", min_length=1)
    content: str = Field(min_length=1)
    is_contact_message: StrictBool = Field(default_factory=_coin_flip, alias="isContactMessage")
    timestamp: Optional[datetime] = None

    @field_validator("timestamp", mode="before")
    @classmethod
    def _reject_epoch(cls, v):
        if isinstance(v, (int, float)) or (isinstance(v, str) and v.strip().replace(".", "", 1).isdigit()):
            raise ValueError("timestamp must be an ISO-8601 string or a datetime")
        return v

    @field_validator("timestamp")
    @classmethod
    def _normalize_timestamp(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_utc(v) if v is not None else None


def format_validation_errors(errors: Iterable[Dict[str, Any]]) -> List[Dict[str, str]]:
    """Turn pydantic error dicts into [{field, message}], dropping the "body" prefix."""
    formatted = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] == "body":
            loc = loc[1:]
        formatted.append({"field": ".".join(loc), "message": err.get("msg", "Invalid value")})
    return formatted


def validate_payload(model: Type[T], payload: Any) -> T:
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise ValidationFailed("Validation error", format_validation_errors(e.errors()))
