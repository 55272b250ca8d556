"""Settings read from the environment and ``.env``."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Portal configuration.

    Field names map to upper-case environment variables, e.g.
    ``SUPABASE_URL``. The Supabase URL and secret key have no default.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="settlement-portal-backend", description="Application name")
    app_env: str = Field(default="development", description="development, staging or production")
    debug: bool = Field(default=False, description="Expose API docs and enable reload")

    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8080, description="Bind port")

    cors_origins: str = Field(default="http://localhost:3000", description="Comma-separated allowed origins")

    supabase_url: str = Field(..., description="Supabase project URL")
    supabase_secret_key: str = Field(..., description="Supabase secret key; bypasses row level security")
    # Access tokens are verified with the JWK when set, else the shared secret.
    supabase_signing_key_jwk: str = Field(default="", description="ES256 public signing key as a JWK JSON string")
    supabase_jwt_secret: str = Field(default="", description="Legacy HS256 JWT secret")
    jwt_audience: str = Field(default="authenticated", description="Required aud claim")

    temp_credential_prefix: str = Field(
        default="temp_",
        min_length=1,
        description="Prefix of generated login IDs and passwords; its presence means setup is pending",
    )
    min_password_length: int = Field(default=6, ge=1, description="Minimum password length")
    invitation_expiry_days: int = Field(default=7, ge=1, description="Days an invitation stays valid")

    rate_limit_login_attempts: int = Field(default=10, ge=1, description="Login attempts per login ID per window")
    rate_limit_window_seconds: int = Field(default=300, ge=1, description="Login throttle window")

    max_request_body_size: int = Field(default=1_048_576, description="Largest accepted request body in bytes")

    resend_api_key: str = Field(default="", description="Resend API key; email is skipped when empty")
    email_from_address: str = Field(
        default="Settlement Robot <noreply@settlement-robot.example>",
        description="Sender of transactional email",
    )
    frontend_url: str = Field(default="http://localhost:3000", description="Base URL for links in email")

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def email_enabled(self) -> bool:
        return bool(self.resend_api_key)


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings; ``get_settings.cache_clear()`` reloads them."""
    return Settings()
