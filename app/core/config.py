from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "local"
    APP_NAME: str = "Cinema Booking API"
    LOG_LEVEL: str = "INFO"
    # Comma-separated origins for CORS (e.g. https://bioskop.example,https://admin.bioskop.example). If empty, uses localhost defaults.
    CORS_ORIGINS: str = ""
    # When True, raw datastore error text is returned to callers. Keep False outside local dev.
    EXPOSE_ERROR_DETAILS: bool = False

    DATABASE_URL: str
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 0

    @field_validator("DATABASE_URL", mode="after")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Render and others give postgres://; SQLAlchemy expects postgresql+psycopg2://."""
        if v and v.startswith("postgres://"):
            return "postgresql+psycopg2://" + v[11:]
        return v
    REDIS_URL: str = "redis://localhost:6379/0"

    # Seat availability push (Redis pub/sub). Disabled -> no-op broadcaster.
    SEAT_BROADCAST_ENABLED: bool = False
    SEAT_CHANNEL_PREFIX: str = "seats"

    # Payment proof storage
    UPLOAD_DIR: str = "./public/uploads/payments"
    UPLOAD_URL_PREFIX: str = "/uploads/payments"
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024


settings = Settings()
