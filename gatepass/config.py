"""Application configuration"""
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    # Database
    DATABASE_URL: str = "sqlite:///./gatepass.db"
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 10
    DATABASE_POOL_TIMEOUT: int = 30
    DATABASE_POOL_RECYCLE: int = 3600  # Recycle connections after 1 hour

    # Authentication
    ADMIN_API_KEY: str = "admin-secret-key-change-in-production"

    # Redemption references
    PUBLIC_BASE_URL: str = "http://localhost:8000"
    TOKEN_ALPHABET: str = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    TOKEN_LENGTH: int = 10
    TOKEN_ISSUE_ATTEMPTS: int = 5  # fresh tokens tried on a unique-index collision

    # Gate pass requests
    REASON_MIN_LENGTH: int = 3
    REASON_MAX_LENGTH: int = 500

    # Webhooks (fire-and-forget notifications for pass events)
    WEBHOOK_URL: Optional[str] = None          # Any HTTPS URL; Slack incoming webhooks auto-detected
    WEBHOOK_SECRET: Optional[str] = None       # If set, signs body with HMAC-SHA256

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT: List[str] = ["100/minute", "1000/hour"]
    RATE_LIMIT_SCAN: str = "30/minute"
    RATE_LIMIT_STORAGE_URI: str = "memory://"  # Use redis:// for production

    # Monitoring
    METRICS_ENABLED: bool = True
    METRICS_PATH: str = "/metrics"

    # JWT Authentication
    JWT_PRIVATE_KEY: Optional[str] = None   # RSA-2048 PEM string; auto-generated on startup if absent
    JWT_ALGORITHM: str = "RS256"
    JWT_EXPIRE_SECONDS: int = 28800         # 8 hours
    JWT_KEY_ID: Optional[str] = None        # kid claim for key rotation tracking

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins string into list"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]


settings = Settings()
