from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./dev.db"
    APP_HOST: str = "127.0.0.1"
    APP_PORT: int = 8000
    SECRET_KEY: str = "change-this-secret"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    FRONTEND_ORIGINS: List[str] = ["http://localhost:3000"]
    DB_TIMEOUT_SECONDS: float = 5.0
    CART_LOCK_TIMEOUT_SECONDS: float = 10.0
    CART_RETRY_ATTEMPTS: int = 3
    GUEST_COOKIE_NAME: str = "guest_id"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
