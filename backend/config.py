"""
Configuration management for Zero Task
"""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Zero Task"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    PORT: int = 5001

    # Database
    DATABASE_URL: str = "sqlite:///./zero_task.db"

    # Security
    SECRET_KEY: str = "dev-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days

    # Frontend / CORS
    FRONTEND_URL: str = "http://localhost:5173"
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    # Client session storage: "memory" | "local" | "remote"
    STORAGE_MODE: str = "local"
    LOCAL_DATABASE_URL: str = "sqlite:///./zero_task_local.db"
    LEGACY_STORE_PATH: str = "./zero_task_legacy.json"
    API_BASE_URL: str = "http://localhost:5001"
    API_TOKEN: str = ""

    # Audit trail
    AUDIT_LOG_LIMIT: int = 50

    # Revert in-memory mutations when the backing store rejects them
    ROLLBACK_ON_PERSISTENCE_FAILURE: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()
