from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./data/pipeline.db"
    SQL_ECHO: bool = False

    # Sessions
    SECRET_KEY: str = "change-me"
    SESSION_COOKIE: str = "pipeline_session"
    SESSION_MAX_AGE: int = 24 * 60 * 60  # 24 hours
    SESSION_HTTPS_ONLY: bool = False

    # Credits
    DAILY_APPLICATION_LIMIT: int = 10
    REFERRAL_BONUS: int = 5
    REFERRAL_CODE_LENGTH: int = 8
    REFERRAL_CODE_ATTEMPTS: int = 5

    # App
    APP_ENV: str = "development"
    PUBLIC_BASE_URL: str = "http://localhost:5000"
    CORS_ORIGINS: list[str] = ["http://localhost:5000"]
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
