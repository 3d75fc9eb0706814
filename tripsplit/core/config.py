"""
Service configuration loaded from environment variables.
"""
import os


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    APP_NAME = os.getenv("APP_NAME", "Trip Split Service")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Get DATABASE_URL from environment, with fallback to SQLite for local development
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./tripsplit.db")

    # JWT issued by the user service
    SECRET_KEY = os.getenv("SECRET_KEY", "your_secret_key")
    ALGORITHM = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

    # Reject settlements whose balances do not sum to zero instead of
    # returning a partial settlement
    STRICT_ZERO_SUM = _env_flag("STRICT_ZERO_SUM")


settings = Settings()
