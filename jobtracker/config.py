"""
JobTracker - Application configuration.

Centralized configuration using Pydantic Settings for environment variable management.
A Settings object is built once at process start and handed to create_app().

Environment Variables:
    All settings can be overridden via environment variables with JOBTRACKER_ prefix.

    Auth Settings:
        JOBTRACKER_AUTH_STRATEGY=bearer      - "bearer" (JWT) or "session" (server-side session cookie)
        JOBTRACKER_SECRET_KEY=...            - Signing key for tokens and cookies (required in production)

    LinkedIn Settings:
        JOBTRACKER_LINKEDIN_CLIENT_ID=...    - Enables "Sign in with LinkedIn" and job import
        JOBTRACKER_LINKEDIN_CLIENT_SECRET=...
"""
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class AuthSettings(BaseSettings):
    """
    Authentication configuration settings.

    Exactly one credential strategy is active per deployment:
        bearer  - signed JWT in the Authorization header
        session - server-side session row referenced by a signed cookie

    For production deployment:
        1. Generate a secret key: openssl rand -hex 32
        2. Set JOBTRACKER_SECRET_KEY to the generated key
        3. Set JOBTRACKER_SESSION_COOKIE_SECURE=true when served over HTTPS
    """
    auth_strategy: Literal["bearer", "session"] = "bearer"
    secret_key: str = "development-secret-key-change-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24

    # Session strategy
    session_cookie_name: str = "jobtracker_session"
    session_cookie_secure: bool = False
    session_expire_days: int = 7

    min_password_length: int = 6
    bcrypt_rounds: int = 12

    class Config:
        env_prefix = "JOBTRACKER_"
        env_file = ".env"
        extra = "ignore"


class LinkedInSettings(BaseSettings):
    """LinkedIn OAuth and job API configuration."""
    linkedin_client_id: Optional[str] = None
    linkedin_client_secret: Optional[str] = None
    linkedin_metadata_url: str = "https://www.linkedin.com/oauth/.well-known/openid-configuration"
    linkedin_api_base_url: str = "https://api.linkedin.com/v2"
    linkedin_timeout: float = 10.0

    @property
    def oauth_configured(self) -> bool:
        return bool(self.linkedin_client_id and self.linkedin_client_secret)

    class Config:
        env_prefix = "JOBTRACKER_"
        env_file = ".env"
        extra = "ignore"


class Settings(BaseSettings):
    """Combined application settings."""
    auth: AuthSettings = Field(default_factory=AuthSettings)
    linkedin: LinkedInSettings = Field(default_factory=LinkedInSettings)

    # "development" exposes error details in 500 responses
    environment: str = "production"

    # CORS allowed origins (comma-separated, e.g. "http://localhost:5173,https://myapp.com")
    allowed_origins: str = "http://localhost:5173"

    # Database
    database_url: str = "sqlite:///./data/jobtracker.db"

    # Database connection pool (PostgreSQL only)
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_recycle: int = 1800

    rate_limit_enabled: bool = True

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    class Config:
        env_prefix = "JOBTRACKER_"
        env_file = ".env"
        extra = "ignore"
