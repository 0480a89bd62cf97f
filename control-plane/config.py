# control-plane/config.py
"""
Application Configuration
Uses pydantic-settings for environment variable management
"""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables
    Create a .env file for local development
    """

    # === Application ===
    APP_NAME: str = "Spider Subnet Control Plane"
    APP_VERSION: str = "1.0.0"
    ENV: str = "development"  # development, staging, production
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # === API ===
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 5722
    API_PREFIX: str = "/api/v1"

    # Webhook TLS (the API server only talks HTTPS to admission webhooks)
    TLS_CERT_FILE: Optional[str] = None
    TLS_KEY_FILE: Optional[str] = None

    # === Kubernetes ===
    IN_CLUSTER: bool = True
    KUBECONFIG: Optional[str] = None

    # === IPAM ===
    ENABLE_IPV4: bool = True
    ENABLE_IPV6: bool = True
    CLUSTER_DEFAULT_INTERFACE_NAME: str = "eth0"
    CLUSTER_SUBNET_DEFAULT_FLEXIBLE_IP_NUMBER: int = 1

    # === Admission Audit ===
    DATABASE_URL: str = "sqlite:///./subnet-audit.db"
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    ENABLE_AUDIT_LOG: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.ENV.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development"""
        return self.ENV.lower() == "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Cached settings instance
    Use this to get settings throughout the application
    """
    return Settings()


settings = get_settings()
