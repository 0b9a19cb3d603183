"""
Form validation used by the goal and auth forms (and the CLI prompts).

Every validator returns a localized error message, or None when the value is
valid. Messages are available in English ("en") and Polish ("pl").
"""

import math
import re
from datetime import date
from decimal import Decimal
from typing import Optional

from api.locales import get_message
from config.settings import get_today
from database.models import (
    GOAL_NAME_MAX_LENGTH,
    PROGRESS_NOTES_MAX_LENGTH,
    REFLECTION_NOTES_MAX_LENGTH,
    AI_SUMMARY_MAX_LENGTH,
    VALUE_PRECISION,
    VALUE_SCALE,
)
from utils.date_format import parse_date

PASSWORD_MIN_LENGTH = 8

_DEADLINE_FORM_PATTERN = re.compile(r"^\d{2}\.\d{2}\.\d{4}$")
_ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_DECIMAL_PATTERN = re.compile(r"^\d+(\.\d+)?$")
_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_trim(value: str) -> str:
    return value.strip()


def validate_goal_name(value: str, lang: str = "en", max_length: int = GOAL_NAME_MAX_LENGTH) -> Optional[str]:
    trimmed = normalize_trim(value)
    if len(trimmed) < 1:
        return get_message("name_required", lang)
    if len(trimmed) > max_length:
        return get_message("name_too_long", lang, max=max_length)
    return None


def validate_progress_notes(value: str, lang: str = "en") -> Optional[str]:
    if len(normalize_trim(value)) > PROGRESS_NOTES_MAX_LENGTH:
        return get_message("progress_notes_too_long", lang, max=PROGRESS_NOTES_MAX_LENGTH)
    return None


def validate_reflection_notes(value: str, lang: str = "en") -> Optional[str]:
    if len(normalize_trim(value)) > REFLECTION_NOTES_MAX_LENGTH:
        return get_message("reflection_notes_too_long", lang, max=REFLECTION_NOTES_MAX_LENGTH)
    return None


def validate_ai_summary(value: str, lang: str = "en") -> Optional[str]:
    if len(normalize_trim(value)) > AI_SUMMARY_MAX_LENGTH:
        return get_message("ai_summary_too_long", lang, max=AI_SUMMARY_MAX_LENGTH)
    return None


def _validate_stored_range(value: Decimal, lang: str) -> Optional[str]:
    """Reject values the numeric columns would round or overflow."""
    _, digits, exponent = value.normalize().as_tuple()
    if -exponent > VALUE_SCALE:
        return get_message("value_too_precise", lang, max=VALUE_SCALE)
    integer_digits = len(digits) + exponent
    if integer_digits > VALUE_PRECISION - VALUE_SCALE:
        return get_message("value_too_large", lang, max=VALUE_PRECISION - VALUE_SCALE)
    return None


def validate_target_value(value: str, lang: str = "en") -> Optional[str]:
    """Accepts anything that parses as a finite positive number ("12", "12.5", "1e3")."""
    trimmed = normalize_trim(value)
    if not trimmed:
        return get_message("target_value_required", lang)
    try:
        parsed = float(trimmed)
    except ValueError:
        return get_message("target_value_not_positive", lang)
    if not math.isfinite(parsed) or parsed <= 0:
        return get_message("target_value_not_positive", lang)
    return _validate_stored_range(Decimal(trimmed), lang)


def validate_deadline_future(value: str, lang: str = "en", today: Optional[date] = None) -> Optional[str]:
    """Deadline typed in the form as dd.MM.yyyy; must be a real date strictly after today."""
    if not _DEADLINE_FORM_PATTERN.match(value):
        return get_message("deadline_format", lang)

    parsed = parse_date(value)
    if parsed is None:
        return get_message("invalid_date", lang)

    if parsed <= (today or get_today()):
        return get_message("deadline_not_future", lang)
    return None


def validate_email(value: str, lang: str = "en") -> Optional[str]:
    trimmed = normalize_trim(value)
    if not trimmed:
        return get_message("email_required", lang)
    if not _EMAIL_PATTERN.match(trimmed):
        return get_message("email_invalid", lang)
    return None


def validate_password(value: str, lang: str = "en") -> Optional[str]:
    if not value:
        return get_message("password_required", lang)
    if len(value) < PASSWORD_MIN_LENGTH:
        return get_message("password_too_short", lang, min=PASSWORD_MIN_LENGTH)
    return None


def validate_confirm_password(password: str, confirm_password: str, lang: str = "en") -> Optional[str]:
    if not confirm_password:
        return get_message("confirm_password_required", lang)
    if password != confirm_password:
        return get_message("passwords_do_not_match", lang)
    return None


# API payload checks (ISO dates and strict decimal strings)

def validate_decimal_string(value: str, lang: str = "en") -> Optional[str]:
    if not value:
        return get_message("target_value_required", lang)
    if not _DECIMAL_PATTERN.match(value):
        return get_message("target_value_not_decimal", lang)
    parsed = Decimal(value)
    if parsed <= 0:
        return get_message("target_value_not_positive", lang)
    return _validate_stored_range(parsed, lang)


def parse_iso_deadline(value: str, lang: str = "en", today: Optional[date] = None):
    """
    Parse a YYYY-MM-DD deadline that must lie strictly after today.

    Returns (date, None) on success and (None, message) otherwise.
    """
    if not _ISO_DATE_PATTERN.match(value):
        return None, get_message("deadline_iso_format", lang)
    try:
        parsed = date.fromisoformat(value)
    except ValueError:
        return None, get_message("invalid_date", lang)
    if parsed <= (today or get_today()):
        return None, get_message("deadline_not_future", lang)
    return parsed, None
