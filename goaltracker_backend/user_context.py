import contextvars
from typing import Optional

from config.settings import DEFAULT_LOCALE

SUPPORTED_LOCALES = ("en", "pl")

# Per-request values set by the HTTP middleware
current_user_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("current_user_id", default=None)
current_locale_var: contextvars.ContextVar[str] = contextvars.ContextVar("current_locale", default=DEFAULT_LOCALE)

def set_current_user_id(user_id: Optional[str]):
    """Set the current user id in the context variable"""
    current_user_id_var.set(user_id)

def get_current_user_id() -> Optional[str]:
    """Get the current user id from the context variable"""
    return current_user_id_var.get()

def set_current_locale(locale: str):
    current_locale_var.set(locale if locale in SUPPORTED_LOCALES else DEFAULT_LOCALE)

def get_current_locale() -> str:
    return current_locale_var.get()

def negotiate_locale(accept_language: Optional[str]) -> str:
    """
    Pick the best supported language from an Accept-Language header.

    "pl-PL,pl;q=0.9,en;q=0.8" -> "pl". Unknown or missing headers give the default locale.
    """
    if not accept_language:
        return DEFAULT_LOCALE

    candidates = []
    for position, part in enumerate(accept_language.split(",")):
        pieces = part.strip().split(";")
        tag = pieces[0].strip().lower()
        if not tag:
            continue
        quality = 1.0
        for param in pieces[1:]:
            param = param.strip()
            if param.startswith("q="):
                try:
                    quality = float(param[2:])
                except ValueError:
                    quality = 0.0
        if quality <= 0:
            continue
        candidates.append((-quality, position, tag.split("-")[0]))

    for _, _, language in sorted(candidates):
        if language in SUPPORTED_LOCALES:
            return language
    return DEFAULT_LOCALE
