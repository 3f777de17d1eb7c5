from pydantic_settings import BaseSettings
from typing import List, Any, Optional
from pathlib import Path
import json


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "ParcInfo"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    API_V1_PREFIX: str = "/api/v1"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./parcinfo.db"
    DB_ECHO: bool = False

    # ==========================================
    # Sessions
    # ==========================================
    SESSION_BACKEND: str = "memory"  # memory | redis
    REDIS_URL: str = "redis://localhost:6379/0"
    SESSION_TTL_SECONDS: int = 86400  # 24 hours
    SESSION_COOKIE_NAME: str = "parcinfo_session"
    SESSION_COOKIE_SECURE: Optional[bool] = None  # None = secure only in production
    SESSION_COOKIE_SAMESITE: str = "lax"

    # ==========================================
    # Password hashing (scrypt)
    # ==========================================
    SCRYPT_N: int = 16384  # lower in tests, never in production
    SCRYPT_R: int = 8
    SCRYPT_P: int = 1
    SCRYPT_SALT_BYTES: int = 16
    SCRYPT_KEY_LENGTH: int = 64
    PASSWORD_MIN_LENGTH: int = 6

    # ==========================================
    # Rate Limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    LOGIN_RATE_LIMIT: str = "5/minute"
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:5000,http://localhost:5173,http://127.0.0.1:5000,http://127.0.0.1:5173"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/parcinfo.log"

    # ==========================================
    # Demo data
    # ==========================================
    SEED_DEMO_DATA: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if self.LOG_FILE:
            Path(self.LOG_FILE).parent.mkdir(exist_ok=True, parents=True)

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def session_cookie_secure(self) -> bool:
        """Secure cookies are the default in production only"""
        if self.SESSION_COOKIE_SECURE is None:
            return self.is_production
        return self.SESSION_COOKIE_SECURE

    @property
    def should_seed_demo_data(self) -> bool:
        return self.SEED_DEMO_DATA and not self.is_production


settings = Settings()
