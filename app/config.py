import os
from typing import List
from dotenv import load_dotenv
from pydantic_settings import BaseSettings

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application configuration from environment variables"""

    # App
    app_name: str = "Solennia API"
    debug: bool = os.getenv("DEBUG", "False").lower() == "true"
    cors_allowed_origins: str = os.getenv("CORS_ALLOWED_ORIGINS", "*")

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./solennia.db")

    # Auth
    jwt_secret: str = os.getenv("JWT_SECRET", "solennia_super_secret_key_2025")
    jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
    jwt_expire_hours: int = int(os.getenv("JWT_EXPIRE_HOURS", "24"))

    # OpenAI
    openai_api_key: str = os.getenv("OPENAI_API_KEY", "")
    openai_model: str = os.getenv("OPENAI_MODEL", "gpt-3.5-turbo")
    openai_max_tokens: int = int(os.getenv("OPENAI_MAX_TOKENS", "1000"))
    openai_temperature: float = float(os.getenv("OPENAI_TEMPERATURE", "0.7"))

    # AI rate limiting (per user, sliding window)
    ai_rate_limit_max_requests: int = int(os.getenv("AI_RATE_LIMIT_MAX_REQUESTS", "100"))
    ai_rate_limit_window_seconds: int = int(os.getenv("AI_RATE_LIMIT_WINDOW_SECONDS", "3600"))

    # Scheduler
    scheduler_enabled: bool = os.getenv("SCHEDULER_ENABLED", "True").lower() == "true"
    reminder_lead_hours: int = int(os.getenv("REMINDER_LEAD_HOURS", "24"))

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_json: bool = os.getenv("LOG_JSON", "True").lower() == "true"

    @property
    def cors_origins(self) -> List[str]:
        origins = [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]
        return origins or ["*"]

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
