from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import List, Optional
from datetime import date
from decimal import Decimal
import uuid

from api.locales import get_message
from database.models import (
    GOAL_ITERATION_NAME_MAX_LENGTH,
    PROGRESS_NOTES_MAX_LENGTH,
    REFLECTION_NOTES_MAX_LENGTH,
    AI_SUMMARY_MAX_LENGTH,
    ABANDONMENT_REASON_MAX_LENGTH,
)
from services import validation
from user_context import get_current_locale

LOGIN_PASSWORD_MIN_LENGTH = 6
SYNC_STATUSES_MAX_GOAL_IDS = 200

def _fail(message: Optional[str]):
    if message:
        raise ValueError(message)

def _require_str(value):
    if not isinstance(value, str):
        raise ValueError(get_message("invalid_value", get_current_locale()))
    return value

def _decimal(value) -> Decimal:
    value = _require_str(value).strip()
    _fail(validation.validate_decimal_string(value, get_current_locale()))
    return Decimal(value)

def _deadline(value) -> date:
    parsed, error = validation.parse_iso_deadline(_require_str(value).strip(), get_current_locale())
    _fail(error)
    return parsed

def _name(value, max_length: int) -> str:
    value = _require_str(value)
    _fail(validation.validate_goal_name(value, get_current_locale(), max_length=max_length))
    return value.strip()

def _bounded_text(value, max_length: int, message_key: str, required_key: Optional[str] = None) -> Optional[str]:
    """Trim free text; empty optional text becomes None."""
    if value is None:
        if required_key:
            raise ValueError(get_message(required_key, get_current_locale()))
        return None
    value = _require_str(value).strip()
    if not value:
        if required_key:
            raise ValueError(get_message(required_key, get_current_locale()))
        return None
    if len(value) > max_length:
        raise ValueError(get_message(message_key, get_current_locale(), max=max_length))
    return value

# --- Auth ---

class RegisterRequest(BaseModel):
    email: str
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, v):
        v = _require_str(v)
        _fail(validation.validate_email(v, get_current_locale()))
        return v.strip().lower()

    @field_validator("password", mode="before")
    @classmethod
    def check_password(cls, v):
        v = _require_str(v)
        _fail(validation.validate_password(v, get_current_locale()))
        return v

class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, v):
        v = _require_str(v)
        _fail(validation.validate_email(v, get_current_locale()))
        return v.strip().lower()

    @field_validator("password", mode="before")
    @classmethod
    def check_password(cls, v):
        v = _require_str(v)
        if len(v) < LOGIN_PASSWORD_MIN_LENGTH:
            raise ValueError(get_message("password_too_short", get_current_locale(), min=LOGIN_PASSWORD_MIN_LENGTH))
        return v

class UserPublic(BaseModel):
    id: str
    email: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

# --- Goals ---

class GoalCreate(BaseModel):
    name: str
    target_value: Decimal
    deadline: date
    parent_goal_id: Optional[uuid.UUID] = None

    @field_validator("name", mode="before")
    @classmethod
    def check_name(cls, v):
        return _name(v, validation.GOAL_NAME_MAX_LENGTH)

    @field_validator("target_value", mode="before")
    @classmethod
    def check_target_value(cls, v):
        return _decimal(v)

    @field_validator("deadline", mode="before")
    @classmethod
    def check_deadline(cls, v):
        return _deadline(v)

class GoalUpdate(BaseModel):
    """Partial update; unknown fields are rejected and at least one field is required."""
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    target_value: Optional[Decimal] = None
    deadline: Optional[date] = None
    reflection_notes: Optional[str] = None
    ai_summary: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def check_name(cls, v):
        return _name(v, validation.GOAL_NAME_MAX_LENGTH)

    @field_validator("target_value", mode="before")
    @classmethod
    def check_target_value(cls, v):
        return _decimal(v)

    @field_validator("deadline", mode="before")
    @classmethod
    def check_deadline(cls, v):
        return _deadline(v)

    @field_validator("reflection_notes", mode="before")
    @classmethod
    def check_reflection_notes(cls, v):
        return _bounded_text(v, REFLECTION_NOTES_MAX_LENGTH, "reflection_notes_too_long")

    @field_validator("ai_summary", mode="before")
    @classmethod
    def check_ai_summary(cls, v):
        return _bounded_text(v, AI_SUMMARY_MAX_LENGTH, "ai_summary_too_long")

    @model_validator(mode="after")
    def check_not_empty(self):
        if not self.model_fields_set:
            raise ValueError(get_message("at_least_one_field", get_current_locale()))
        return self

class AbandonGoalRequest(BaseModel):
    reason: str

    @field_validator("reason", mode="before")
    @classmethod
    def check_reason(cls, v):
        return _bounded_text(v, ABANDONMENT_REASON_MAX_LENGTH, "reason_too_long", required_key="reason_required")

class RetryGoalRequest(BaseModel):
    target_value: Decimal
    deadline: date
    name: Optional[str] = None

    @field_validator("target_value", mode="before")
    @classmethod
    def check_target_value(cls, v):
        return _decimal(v)

    @field_validator("deadline", mode="before")
    @classmethod
    def check_deadline(cls, v):
        return _deadline(v)

    @field_validator("name", mode="before")
    @classmethod
    def check_name(cls, v):
        if v is None:
            return None
        return _name(v, GOAL_ITERATION_NAME_MAX_LENGTH)

class ContinueGoalRequest(BaseModel):
    name: str
    target_value: Decimal
    deadline: date

    @field_validator("name", mode="before")
    @classmethod
    def check_name(cls, v):
        return _name(v, GOAL_ITERATION_NAME_MAX_LENGTH)

    @field_validator("target_value", mode="before")
    @classmethod
    def check_target_value(cls, v):
        return _decimal(v)

    @field_validator("deadline", mode="before")
    @classmethod
    def check_deadline(cls, v):
        return _deadline(v)

class SyncStatusesRequest(BaseModel):
    goal_ids: Optional[List[uuid.UUID]] = Field(default=None, max_length=SYNC_STATUSES_MAX_GOAL_IDS)

# --- Progress ---

class ProgressCreate(BaseModel):
    value: Decimal
    notes: Optional[str] = None

    @field_validator("value", mode="before")
    @classmethod
    def check_value(cls, v):
        return _decimal(v)

    @field_validator("notes", mode="before")
    @classmethod
    def check_notes(cls, v):
        return _bounded_text(v, PROGRESS_NOTES_MAX_LENGTH, "progress_notes_too_long")

class ProgressUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    value: Optional[Decimal] = None
    notes: Optional[str] = None

    @field_validator("value", mode="before")
    @classmethod
    def check_value(cls, v):
        return _decimal(v)

    @field_validator("notes", mode="before")
    @classmethod
    def check_notes(cls, v):
        return _bounded_text(v, PROGRESS_NOTES_MAX_LENGTH, "progress_notes_too_long")

    @model_validator(mode="after")
    def check_not_empty(self):
        if not self.model_fields_set:
            raise ValueError(get_message("at_least_one_field", get_current_locale()))
        return self

# --- AI summary ---

class GenerateAiSummaryRequest(BaseModel):
    force: bool = False

class AiSummaryUpdate(BaseModel):
    ai_summary: str

    @field_validator("ai_summary", mode="before")
    @classmethod
    def check_ai_summary(cls, v):
        return _bounded_text(v, AI_SUMMARY_MAX_LENGTH, "ai_summary_too_long", required_key="ai_summary_required")
