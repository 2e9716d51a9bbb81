from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "CRM Access Gate"
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # -------------------------------------------------
    # CORS
    # -------------------------------------------------
    BACKEND_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # Supabase (identity + permission records)
    # -------------------------------------------------
    SUPABASE_URL: Optional[str] = None
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None

    # -------------------------------------------------
    # Session credential verification
    # -------------------------------------------------
    JWT_SECRET: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"

    # -------------------------------------------------
    # Permission store
    # -------------------------------------------------
    PERMISSION_STORE_BACKEND: str = Field(
        "supabase",
        description="'supabase' for production, 'memory' for local development",
    )
    PERMISSION_CACHE_TTL_SECONDS: int = Field(
        0,
        description="TTL for cached permission records; 0 disables the cache",
    )

    # -------------------------------------------------
    # Access-denied audit webhook (Slack, Discord, etc.)
    # -------------------------------------------------
    ACCESS_AUDIT_WEBHOOK_URL: Optional[str] = None

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    model_config = SettingsConfigDict(case_sensitive=True)


# Instantiate settings
settings = Settings()
