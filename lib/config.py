"""Configuration management for the application."""
import os
from dotenv import load_dotenv

from utils.errors import ConfigError

# Load environment variables from .env file
load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


# Supabase configuration
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_SERVICE_KEY = os.getenv("SUPABASE_SERVICE_KEY")
SUPABASE_STORAGE_BUCKET = os.getenv("SUPABASE_STORAGE_BUCKET", "workbody-documents")
SUPABASE_REALTIME_ENABLED = _flag("SUPABASE_REALTIME_ENABLED")

# OpenRouter configuration
OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY")
OPENROUTER_MODEL = os.getenv("OPENROUTER_MODEL", "openai/gpt-4o-mini")
OPENROUTER_BASE_URL = os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1")
OPENROUTER_SITE_URL = os.getenv("OPENROUTER_SITE_URL", "https://pecpulse.local")
OPENROUTER_APP_NAME = os.getenv("OPENROUTER_APP_NAME", "PEC Pulse")
OPENROUTER_RATE_LIMIT_PER_MINUTE = int(os.getenv("OPENROUTER_RATE_LIMIT_PER_MINUTE", "50"))
OPENROUTER_MIN_REQUEST_GAP = float(os.getenv("OPENROUTER_MIN_REQUEST_GAP", "1"))

# Google Calendar configuration
GOOGLE_CALENDAR_API_KEY = os.getenv("GOOGLE_CALENDAR_API_KEY")

# Dashboard tuning
EXPIRY_WINDOW_DAYS = int(os.getenv("EXPIRY_WINDOW_DAYS", "30"))
UPCOMING_MEETINGS_LIMIT = int(os.getenv("UPCOMING_MEETINGS_LIMIT", "5"))


def require_setting(name: str) -> str:
    """Return a configured value or raise ConfigError naming the missing key."""
    value = globals().get(name) or os.getenv(name)
    if not value:
        raise ConfigError(f"{name} not found in environment variables. Please set it in .env file.")
    return value
