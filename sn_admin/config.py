# === config.py ===

import os
import logging
from logging.handlers import RotatingFileHandler
from pydantic_settings import BaseSettings

# === SN Admin Constants ===
MAX_LOG_LENGTH = 10000
ACTIVITY_LOG_TABLE = "activity_logs"
BOOKINGS_TABLE = "bookings"
DEFAULT_PAGE_SIZE = 25
MAX_PAGE_SIZE = 200


# === Settings Class for Environment Variables ===
class Settings(BaseSettings):
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_KEY: str = ""
    INVOICE_API_URL: str = "https://api.invoiless.com/v1"
    INVOICE_API_KEY: str = ""
    EMAIL_FROM: str = "bookings@sncleaningservices.co.uk"
    PAYMENT_RETURN_URL: str = "https://account.sncleaningservices.co.uk/payments"
    REQUEST_TIMEOUT: float = 15.0
    BULK_MAX_WORKERS: int = 8
    LOG_DIR: str = "logs"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()

# === Logging Setup ===

LOG_FILE = os.path.join(settings.LOG_DIR, "sn_admin.log")
os.makedirs(settings.LOG_DIR, exist_ok=True)

logger = logging.getLogger("sn_admin")
logger.setLevel(logging.DEBUG)

formatter = logging.Formatter(
    "%(asctime)s - %(levelname)s - %(message)s"
)

if not logger.handlers:
    file_handler = RotatingFileHandler(LOG_FILE, maxBytes=5 * 1024 * 1024, backupCount=5)
    file_handler.setFormatter(formatter)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(stream_handler)


# === ENV Safety Check ===

def check_settings() -> list:
    missing_env = []

    if not settings.SUPABASE_URL:
        missing_env.append("SUPABASE_URL")
    if not settings.SUPABASE_SERVICE_KEY:
        missing_env.append("SUPABASE_SERVICE_KEY")
    if not settings.INVOICE_API_KEY:
        missing_env.append("INVOICE_API_KEY")

    if missing_env:
        logger.error(f"❌ Missing critical ENV variables: {', '.join(missing_env)}")
    else:
        logger.info("✅ SN Admin config loaded and validated.")

    return missing_env
