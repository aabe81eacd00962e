"""
Application configuration from environment variables.
Loads .env from the backend directory so AWS and JWT settings are found regardless of cwd.
"""
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SECRET_KEY = "change-me-in-production"

# .env next to backend/ (parent of ibuddy/); load explicitly so keys are set even when run from repo root
_BACKEND_DIR = Path(__file__).resolve().parent.parent
_ENV_FILE = _BACKEND_DIR / ".env"

if _ENV_FILE.exists():
    from dotenv import load_dotenv
    load_dotenv(_ENV_FILE, override=False)


class Settings(BaseSettings):
    """Load and validate config from env."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Key-value store backing database: sqlite for local work, postgresql for production
    database_url: str = "sqlite:///./ibuddy_dev.db"

    # Set ENV=production in production; used to enforce SECRET_KEY.
    env: str = ""

    secret_key: str = DEFAULT_SECRET_KEY
    jwt_algorithm: str = "HS256"
    jwt_expire_hours: int = 24

    # Assets: "local" stores uploads under upload_dir, "s3" uses the private uploads bucket.
    asset_host: str = "local"
    upload_dir: Path = Path("./uploads")
    max_upload_bytes: int = 10 * 1024 * 1024

    aws_region: str = ""
    s3_bucket_name: str = ""
    s3_signed_url_expires_seconds: int = 600

    # Email: "ses" sends through Amazon SES, "mock" only logs (local development, tests).
    email_backend: str = "mock"
    ses_email_source: str = ""

    # False: any status may follow any other. True: only the transition table in models/mentee.py.
    strict_mentee_status_transitions: bool = False

    # Store, S3 and SES calls: attempts before giving up (exponential backoff between).
    retry_attempts: int = 4
    # Concurrent deletes when removing a mentee together with its notes.
    fanout_max_workers: int = 8

    # Optional: create this ADMIN at startup when it does not exist yet.
    bootstrap_admin_email: str = ""
    bootstrap_admin_password: str = ""

    # CORS: comma-separated origins
    cors_origins: str = "http://localhost:3000"

    debug: bool = False

    @field_validator("asset_host", "email_backend", mode="before")
    @classmethod
    def _lower(cls, v: str) -> str:
        return (v or "").strip().lower()

    @property
    def is_production(self) -> bool:
        return (self.env or "").strip().lower() == "production"


settings = Settings()
