from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    # Chat completion provider (OpenAI-compatible, e.g. DeepSeek)
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_BASE_URL: Optional[str] = None
    OPENAI_MODEL: str = "deepseek-chat"
    OPENAI_TEMPERATURE: float = 0.7
    OPENAI_REQUEST_TIMEOUT_SECONDS: float = 10.0
    OPENAI_CLIENT_TIMEOUT_SECONDS: float = 180.0
    OPENAI_MAX_RETRIES: int = 3

    # AMap Web Service API
    AMAP_WEB_KEY: Optional[str] = None
    AMAP_BASE_URL: str = "https://restapi.amap.com"
    AMAP_PAGE_SIZE: int = 10
    AMAP_HTTP_TIMEOUT_SECONDS: float = 10.0

    # POI resolution pacing (milliseconds)
    POI_SEARCH_DELAY_MS: int = 200
    POI_RETRY_DELAY_MS: int = 100
    POI_RATE_LIMIT_BACKOFF_MS: int = 500

    # API Configuration
    API_VERSION: str = "1.0.0"
    DEBUG_MODE: bool = False
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    ENVIRONMENT: str = "production"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    model_config = {"env_file": ".env", "case_sensitive": True, "extra": "ignore"}

# Global settings instance
settings = Settings()

def get_settings() -> Settings:
    """Get the global settings instance"""
    return settings

def validate_settings() -> bool:
    """Validate that all required settings are configured"""
    required_settings = [
        "OPENAI_API_KEY",
        "AMAP_WEB_KEY"
    ]

    missing_settings = []
    for setting in required_settings:
        if not getattr(settings, setting):
            missing_settings.append(setting)

    if missing_settings:
        print(f"Missing or invalid settings: {', '.join(missing_settings)}")
        print("Please configure these settings in your .env file or environment variables")
        return False

    return True
