import os
from urllib.parse import quote_plus
from dotenv import load_dotenv

load_dotenv()


def _build_database_url():
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    # Postgres when DB_HOST is configured, local sqlite file otherwise
    host = os.getenv("DB_HOST")
    if not host:
        return "sqlite:///./crm.db"

    user = os.getenv("DB_USER")
    password = quote_plus(os.getenv("DB_PASSWORD", ""))
    port = os.getenv("DB_PORT", "5432")
    name = os.getenv("DB_NAME")
    return f"postgresql://{user}:{password}@{host}:{port}/{name}"


class Settings:
    DATABASE_URL = _build_database_url()

    # LLM SETTINGS (any OpenAI-compatible endpoint with vision support)
    LLM_API_KEY = os.getenv("LLM_API_KEY")
    LLM_BASE_URL = os.getenv("LLM_BASE_URL")
    LLM_MODEL = os.getenv("LLM_MODEL", "gpt-4o")
    LLM_MAX_TOKENS = int(os.getenv("LLM_MAX_TOKENS", "1024"))

    # INBOUND EMAIL WEBHOOK
    INBOUND_EMAIL_SECRET = os.getenv("INBOUND_EMAIL_SECRET")

    # DATES
    APP_TIMEZONE = os.getenv("APP_TIMEZONE")  # e.g. "Europe/London"; server local date if unset

    # SCHEDULER
    AUTO_EXPIRE_SPONSORS = os.getenv("AUTO_EXPIRE_SPONSORS", "false").lower() in ("1", "true", "yes")
    EXPIRY_JOB_HOUR = int(os.getenv("EXPIRY_JOB_HOUR", "1"))

    CORS_ORIGINS = [
        o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
        if o.strip()
    ]
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

settings = Settings()
