from typing import Optional

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    APP_NAME: str = "CircleAge"
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./circleage.db"
    DATABASE_ECHO: bool = False

    # Security
    SECRET_KEY: str = "your-secret-key-here"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 240  # 4 hours

    # SMS Service (Twilio). Leaving any of these unset runs SMS in simulated mode
    TWILIO_ACCOUNT_SID: Optional[str] = None
    TWILIO_AUTH_TOKEN: Optional[str] = None
    TWILIO_PHONE_NUMBER: Optional[str] = None
    TWILIO_API_URL: str = "https://api.twilio.com/2010-04-01"

    # OneMap (Singapore geocoding, routing and themes)
    ONEMAP_API_TOKEN: Optional[str] = None
    ONEMAP_BASE_URL: str = "https://www.onemap.gov.sg/api"
    ONEMAP_ROUTING_URL: str = "https://www.onemap.gov.sg/api/public/routingsvc"

    # OpenWeatherMap
    WEATHER_API_KEY: Optional[str] = None
    WEATHER_API_URL: str = "https://api.openweathermap.org/data/2.5/weather"

    # Medication adherence
    MISSED_DOSE_THRESHOLD_MINUTES: int = 120
    TIMEZONE: str = "Asia/Singapore"  # medication timings are local times of day

    HTTP_TIMEOUT_SECONDS: int = 30

    @property
    def sms_configured(self) -> bool:
        return bool(self.TWILIO_ACCOUNT_SID and self.TWILIO_AUTH_TOKEN and self.TWILIO_PHONE_NUMBER)

    class Config:
        env_file = ".env"

settings = Settings()
