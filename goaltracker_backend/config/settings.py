import datetime
import logging
import os
from dotenv import load_dotenv
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

def get_setting(setting_name: str, default_value: Any = None, setting_type: type = str) -> Any:
    """Read an environment variable and coerce it, falling back to the default on bad input."""
    env_value = os.getenv(setting_name)
    if env_value is None:
        return default_value
    try:
        if setting_type == bool:
            return env_value.lower() in ['true', '1', 'yes', 'on']
        elif setting_type == int:
            return int(env_value)
        elif setting_type == float:
            return float(env_value)
        else:
            return env_value
    except (ValueError, TypeError):
        logger.warning(f"Invalid value for {setting_name}: {env_value!r}, using default {default_value!r}")
        return default_value

# --- Timezone Configuration ---
try:
    # Deadlines are calendar dates, so "today" is evaluated in this zone.
    timezone_name = os.getenv("TZ", "UTC")
    SERVER_TIMEZONE = ZoneInfo(timezone_name)
except ZoneInfoNotFoundError:
    logger.warning(f"Invalid timezone '{timezone_name}' found in TZ environment variable. Defaulting to UTC.")
    SERVER_TIMEZONE = ZoneInfo("UTC")

def get_current_time() -> datetime.datetime:
    """Returns the current time in the server's timezone."""
    return datetime.datetime.now(SERVER_TIMEZONE)

def get_today() -> datetime.date:
    """Returns today's date in the server's timezone."""
    return get_current_time().date()

# --- Database ---
DATABASE_URL = get_setting("DATABASE_URL", "sqlite:///./goaltracker.db")

# --- Authentication ---
SECRET_KEY = get_setting("SECRET_KEY", "change-me-in-production")
JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = get_setting("ACCESS_TOKEN_EXPIRE_MINUTES", 60, int)
REFRESH_TOKEN_EXPIRE_DAYS = get_setting("REFRESH_TOKEN_EXPIRE_DAYS", 7, int)

# --- OpenRouter ---
OPENROUTER_BASE_URL = get_setting("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1/")
OPENROUTER_API_KEY = get_setting("OPENROUTER_API_KEY")
OPENROUTER_MODEL = get_setting("OPENROUTER_MODEL", "anthropic/claude-3-haiku-20240307")
OPENROUTER_APP_URL = get_setting("OPENROUTER_APP_URL", "https://goal-tracker.app")
OPENROUTER_APP_TITLE = get_setting("OPENROUTER_APP_TITLE", "Goal Tracker")
LLM_REQUEST_TIMEOUT = get_setting("LLM_REQUEST_TIMEOUT", 30.0, float)
AI_SUMMARY_TEMPERATURE = get_setting("AI_SUMMARY_TEMPERATURE", 0.7, float)
AI_SUMMARY_MAX_TOKENS = get_setting("AI_SUMMARY_MAX_TOKENS", 5000, int)

# --- Rate limiting ---
AI_RATE_LIMIT_MAX_REQUESTS = get_setting("AI_RATE_LIMIT_MAX_REQUESTS", 10, int)
AI_RATE_LIMIT_WINDOW_SECONDS = get_setting("AI_RATE_LIMIT_WINDOW_SECONDS", 60, int)

# --- Localization ---
DEFAULT_LOCALE = get_setting("DEFAULT_LOCALE", "en").lower()
