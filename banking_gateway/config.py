"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict

# Non-production fallback; override JWT_SECRET in any real deployment
DEFAULT_JWT_SECRET = "temporary-secret-for-interview"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./banking.db"
    sqlite_busy_timeout_seconds: float = 15.0

    # Sessions
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    session_ttl_days: int = 7
    session_cookie_name: str = "session"

    # Credentials
    bcrypt_rounds: int = 10
    default_phone_region: str = "US"

    # Ledger
    account_number_max_attempts: int = 10
    default_page_size: int = 10
    max_funding_amount_cents: int = 1_000_000_000

    # Service
    service_name: str = "banking-gateway"
    log_level: str = "INFO"


settings = Settings()
