from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    app_name: str = "Tenant RBAC"
    app_version: str = "1.0.0"
    debug: bool = False
    api_prefix: str = "/api/v1"

    # Database
    database_url: str = ""  # Loaded from environment, validated in model_validator
    database_echo: bool = False
    database_pool_size: int = 20
    database_max_overflow: int = 30

    # Security - tokens are issued by the external identity provider
    secret_key: str = ""  # Loaded from environment, validated in model_validator
    algorithm: str = "HS256"
    jwt_issuer: str | None = None  # Verified only when set
    jwt_audience: str | None = None  # Verified only when set
    access_token_expire_minutes: int = 480  # 8 hours, used for locally minted tokens

    # CORS - comma-separated list of allowed origins
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Redis Cache
    redis_enabled: bool = True  # Enable/disable caching
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: str | None = None

    # Cache TTL (Time-To-Live) in seconds
    cache_ttl_permissions: int = 300  # 5 minutes

    # RBAC
    default_max_role_slots: int = 5
    default_template_set: str = "generic"

    @model_validator(mode="after")
    def validate_required(self) -> "Settings":
        """Fail fast when required secrets are missing"""
        if not self.database_url:
            raise ValueError("DATABASE_URL is required. Set in environment or .env file.")
        if not self.secret_key:
            raise ValueError("SECRET_KEY is required. Generate with: openssl rand -hex 32")
        if self.default_max_role_slots < 1:
            raise ValueError("DEFAULT_MAX_ROLE_SLOTS must be at least 1")
        return self

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="allow", case_sensitive=False
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
