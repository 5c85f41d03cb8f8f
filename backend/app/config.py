from datetime import timedelta
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = Field(...)

    # JWT - loaded once per process; changing it invalidates every issued token
    jwt_secret_key: str = Field(...)
    jwt_expires_in: timedelta = Field(default=timedelta(days=7))

    # Password hashing / recovery
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)
    reset_token_ttl: timedelta = Field(default=timedelta(hours=1))
    frontend_url: str = Field(default="http://localhost:3001")

    # Open registration lets callers pick any role, admin included; set false to force staff
    allow_role_on_register: bool = Field(default=True)

    # SMTP
    email_user: str = Field(default="")
    email_pass: str = Field(default="")
    smtp_host: str = Field(default="smtp.gmail.com")
    smtp_port: int = Field(default=587)

    # Runtime
    environment: str = Field(default="production")
    log_level: str = Field(default="INFO")
    cors_origins: str = Field(default="http://localhost:3001")

    # Optional bootstrap admin, created at startup if missing
    admin_username: str = Field(default="")
    admin_email: str = Field(default="")
    admin_password: str = Field(default="")

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
