from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    ENVIRONMENT: str = "development"  # development | test | production
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = "sqlite:///./digital_menu.db"

    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Authentication
    VERIFICATION_CODE_TTL_MINUTES: int = 10
    SESSION_TTL_DAYS: int = 30

    # Email dispatch (Resend). With SEND_VERIFICATION_CODE off the code is
    # logged and returned in the API response instead of being emailed.
    SEND_VERIFICATION_CODE: bool = False
    RESEND_API_KEY: str = ""
    RESEND_API_URL: str = "https://api.resend.com/emails"
    RESEND_FROM_EMAIL: str = "Digital Menu <onboarding@resend.dev>"
    EMAIL_TIMEOUT_SECONDS: float = 30.0

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
