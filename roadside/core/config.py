from typing import Optional
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str

    REDIS_URL: str

    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours

    RATE_LIMIT: int = 100
    RATE_LIMIT_WINDOW: int = 600  # 10 minutes

    IDEMPOTENCY_TTL: int = 300  # 5 minutes

    WEATHER_API_URL: str = "https://api.openweathermap.org/data/2.5/weather"
    WEATHER_API_KEY: Optional[str] = None
    WEATHER_TIMEOUT: float = 3.0

    # Zone used for hour-of-day pricing and traffic rules
    TIMEZONE: str = "UTC"
    MAX_NEARBY_RADIUS_M: float = 50_000.0

    WEBHOOK_URL: Optional[str] = None
    WEBHOOK_TIMEOUT: int = 10
    WEBHOOK_RETRIES: int = 3

    API_TITLE: str = "Roadside Assistance Pricing Service"
    API_DESCRIPTION: str = "Dynamic pricing, ETA estimation and nearby lookup for roadside service requests"
    API_VERSION: str = "1.0.0"

    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
