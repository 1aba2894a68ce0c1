"""
Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_JWT_SECRET = "dev-jwt-secret-change-in-production-0123456789"


class Settings(BaseSettings):
    """Application settings loaded from environment."""
    
    model_config = SettingsConfigDict(
        env_prefix="LADDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
    
    # ==========================================================================
    # Environment
    # ==========================================================================
    
    environment: str = "development"
    debug: bool = True
    
    # ==========================================================================
    # API Server
    # ==========================================================================
    
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: str = "http://localhost:8081,http://localhost:19006"
    
    # Base of the reset deep link; the mobile app registers the ladder:// scheme
    frontend_url: str = "ladder://"
    
    # ==========================================================================
    # Authentication
    # ==========================================================================
    
    jwt_secret_key: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    jwt_issuer: str = "ladder-backend"
    jwt_audience: str = "ladder-app"
    jwt_access_token_expire_minutes: int = 7 * 24 * 60
    
    # ==========================================================================
    # Passwords
    # ==========================================================================
    
    password_hash_rounds: int = Field(default=10, ge=4, le=31)
    password_reset_expire_minutes: int = 60
    reset_delivery_timeout_seconds: float = 15.0
    
    # ==========================================================================
    # Email (AWS SES)
    # ==========================================================================
    
    aws_region: str = "us-east-1"
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""
    aws_ses_from_email: str = ""
    
    # ==========================================================================
    # Optional Services
    # ==========================================================================
    
    sentry_dsn: str = ""
    
    # ==========================================================================
    # Validation
    # ==========================================================================
    
    @field_validator("jwt_secret_key")
    @classmethod
    def validate_secret_length(cls, value: str) -> str:
        if len(value) < 32:
            raise ValueError(
                f"jwt_secret_key must be at least 32 characters long (got {len(value)})"
            )
        return value
    
    @model_validator(mode="after")
    def validate_production_settings(self) -> Settings:
        """Refuse the development secret outside development."""
        if self.environment != "development" and self.jwt_secret_key == DEFAULT_JWT_SECRET:
            raise ValueError(
                "LADDER_JWT_SECRET_KEY must be set to a secure value in "
                "non-development environments. Generate one with: "
                'python -c "import secrets; print(secrets.token_urlsafe(48))"'
            )
        return self
    
    # ==========================================================================
    # Helpers
    # ==========================================================================
    
    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
    
    @property
    def is_production(self) -> bool:
        return self.environment == "production"
    
    @property
    def use_aws(self) -> bool:
        """Whether AWS services should be used."""
        return bool(self.aws_access_key_id and self.aws_secret_access_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
