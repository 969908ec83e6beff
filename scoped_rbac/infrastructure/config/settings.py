from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    app_name: str = "Scoped RBAC"
    app_version: str = "1.0.0"
    debug: bool = False

    # Database
    database_url: str = ""  # Loaded from environment, validated in model_validator
    database_echo: bool = False

    # Security
    secret_key: str = ""  # Loaded from environment, validated in model_validator
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 480  # 8 hours

    # CORS - comma-separated list of allowed origins
    allowed_origins: str = "http://localhost:8080,http://localhost:9000"

    # Request context headers for the authorization boundary
    location_header_name: str = "X-Location-ID"
    project_header_name: str = "X-Project-ID"

    # RBAC
    rbac_admin_role_name: str = "Administrador"  # Holders bypass per-module grid checks
    bootstrap_admin_email: str = "admin@example.com"
    default_location_code: str = "HQ"

    @model_validator(mode="after")
    def validate_required(self) -> "Settings":
        """Validate required configuration"""
        if not self.database_url:
            raise ValueError("DATABASE_URL is required. Set in environment or .env file.")
        if not self.secret_key:
            raise ValueError("SECRET_KEY is required. Generate with: openssl rand -hex 32")
        if not self.rbac_admin_role_name.strip():
            raise ValueError("RBAC_ADMIN_ROLE_NAME must not be blank")
        return self

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="allow", case_sensitive=False
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
