from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "local"
    APP_NAME: str = "Renewal Tracker API"
    # Comma-separated origins for CORS (e.g. https://renewals.example.org). If empty, uses localhost defaults.
    CORS_ORIGINS: str = ""
    LOG_LEVEL: str = "INFO"

    SECRET_KEY: str
    ADMIN_SESSION_HOURS: int = 12
    # Either a plain password or a pbkdf2_sha256 hash (ADMIN_PASSWORD_HASH wins when both are set)
    ADMIN_PASSWORD: str = ""
    ADMIN_PASSWORD_HASH: str = ""
    # Shared secret for schedulers hitting /cron/send-reminders. Empty means every call is rejected.
    CRON_SECRET: str = ""

    DATABASE_URL: str

    @field_validator("DATABASE_URL", mode="after")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Render and others give postgres://; SQLAlchemy expects postgresql+psycopg2://."""
        if v and v.startswith("postgres://"):
            return "postgresql+psycopg2://" + v[11:]
        return v
    REDIS_URL: str = "redis://localhost:6379/0"

    # Signed day offsets relative to expires_on, e.g. "-30,-7,-3,-1,1"
    REMINDER_OFFSETS: str = ""
    REMINDER_RUN_INTERVAL_SECONDS: float = 900.0

    SMTP_HOST: str = "localhost"
    SMTP_PORT: int = 25
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM: str = "renewals@renewals.local"
    MAIL_FROM_NAME: str = "Renewals"

    SENDGRID_API_KEY: str = ""
    SENDGRID_FROM_EMAIL: str = ""


settings = Settings()
