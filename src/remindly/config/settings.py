import os
from dotenv import load_dotenv
from remindly.logger import logger
load_dotenv()

__all__ = [
    "LLM_PROVIDER", "GEMINI_API_KEY", "GEMINI_BASE_URL", "OPENAI_API_KEY", "OPENAI_BASE_URL",
    "LLM_MODEL", "EXTRACTION_TIMEOUT_SECONDS",
    "REMINDER_CHECK_INTERVAL_SECONDS", "NOTIFICATION_TIMEOUT_SECONDS", "NOTIFICATION_TITLE", "NOTIFIER",
    "DATA_DB_PATH", "LOG_FILE", "LOG_LEVEL",
    "ENABLE_HTTP_API", "HTTP_HOST", "HTTP_PORT", "API_AUTH_TOKEN",
]


def _parse_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on", "y")


def _parse_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"{name} is not a number: {raw!r}, falling back to {default}")
        return default
    if value <= 0:
        logger.warning(f"{name} must be positive: {raw!r}, falling back to {default}")
        return default
    return value


# LLM (free-text extraction)
LLM_PROVIDER = os.getenv("LLM_PROVIDER", "gemini").strip().lower()
if LLM_PROVIDER not in ("gemini", "openai"):
    logger.critical(f"Invalid LLM_PROVIDER: {LLM_PROVIDER}, only gemini or openai are supported; extraction is disabled")

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GEMINI_BASE_URL = os.getenv("GEMINI_BASE_URL")
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")

if LLM_PROVIDER == "gemini" and not GEMINI_API_KEY:
    logger.warning("LLM_PROVIDER=gemini but GEMINI_API_KEY is not set; extraction is disabled")
if LLM_PROVIDER == "openai" and not OPENAI_API_KEY:
    logger.warning("LLM_PROVIDER=openai but OPENAI_API_KEY is not set; extraction is disabled")

LLM_MODEL = os.getenv("LLM_MODEL", "gemini-2.5-flash" if LLM_PROVIDER == "gemini" else "gpt-4o-mini")
EXTRACTION_TIMEOUT_SECONDS = _parse_float("EXTRACTION_TIMEOUT_SECONDS", 20.0)


# Reminders
REMINDER_CHECK_INTERVAL_SECONDS = _parse_float("REMINDER_CHECK_INTERVAL_SECONDS", 30.0)
NOTIFICATION_TIMEOUT_SECONDS = _parse_float("NOTIFICATION_TIMEOUT_SECONDS", 10.0)
NOTIFICATION_TITLE = "Appointment Reminder"

NOTIFIER = os.getenv("NOTIFIER", "log").strip().lower()
if NOTIFIER not in ("log", "bus"):
    logger.warning(f"Invalid NOTIFIER: {NOTIFIER}, falling back to log")
    NOTIFIER = "log"


# Storage / logs
DATA_DB_PATH = os.getenv("DATA_DB_PATH", "data/remindly.db")
LOG_FILE = os.getenv("LOG_FILE", "logs/remindly.log")
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG").strip().upper()
if LOG_LEVEL not in ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"):
    logger.warning(f"Invalid LOG_LEVEL: {LOG_LEVEL}, falling back to DEBUG")
    LOG_LEVEL = "DEBUG"


# HTTP API
ENABLE_HTTP_API = _parse_bool("ENABLE_HTTP_API", True)
HTTP_HOST = os.getenv("HTTP_HOST", "127.0.0.1")
try:
    HTTP_PORT = int(os.getenv("HTTP_PORT", "18090"))
except ValueError:
    HTTP_PORT = 18090
    logger.warning("HTTP_PORT is invalid, falling back to 18090")
API_AUTH_TOKEN = os.getenv("API_AUTH_TOKEN", "")
