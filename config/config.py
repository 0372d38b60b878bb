import os


class Config:
    """Settings shared by every environment; environment modules override them."""

    SECRET_KEY = os.environ.get("SECRET_KEY") or "school-attendance-dev-key"

    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_NAME = os.environ.get("DB_NAME", "school_attendance")

    AUTO_INIT_DB = bool(int(os.environ.get("AUTO_INIT_DB", "0")))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Width of the per-day status grid returned by the attendance lookup
    PERIODS_PER_DAY = int(os.environ.get("PERIODS_PER_DAY", "8"))
    MARK_RETRY_LIMIT = int(os.environ.get("MARK_RETRY_LIMIT", "3"))
    TOKEN_MAX_AGE_SECONDS = int(os.environ.get("TOKEN_MAX_AGE_SECONDS", str(7 * 24 * 3600)))

    SMS_API_URL = os.environ.get("SMS_API_URL", "")
    SMS_API_KEY = os.environ.get("SMS_API_KEY", "")
    SMS_SENDER = os.environ.get("SMS_SENDER", "SCHOOL")
    SMS_TIMEOUT = float(os.environ.get("SMS_TIMEOUT", "10"))


SECRET_KEY = Config.SECRET_KEY
DB_CONFIG = {
    "host": Config.DB_HOST,
    "port": Config.DB_PORT,
    "user": Config.DB_USER,
    "password": Config.DB_PASSWORD,
    "database": Config.DB_NAME,
}

DEBUG = bool(int(os.environ.get("DEBUG", "1")))
AUTO_INIT_DB = Config.AUTO_INIT_DB
LOG_LEVEL = Config.LOG_LEVEL
PERIODS_PER_DAY = Config.PERIODS_PER_DAY
MARK_RETRY_LIMIT = Config.MARK_RETRY_LIMIT
TOKEN_MAX_AGE_SECONDS = Config.TOKEN_MAX_AGE_SECONDS
SMS_API_URL = Config.SMS_API_URL
SMS_API_KEY = Config.SMS_API_KEY
SMS_SENDER = Config.SMS_SENDER
SMS_TIMEOUT = Config.SMS_TIMEOUT
