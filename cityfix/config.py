from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database (backs the key-value store, users and bucket metadata)
    DATABASE_URL: str = "sqlite:///./cityfix.db"

    # JWT Authentication
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    BCRYPT_ROUNDS: int = 12
    # Public key handed to browsers; never accepted as an admin credential
    ANON_KEY: str = "public-anon-key"

    # Application
    APP_ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    API_PREFIX: str = "/api"
    PUBLIC_BASE_URL: str = "http://localhost:8000"
    CORS_ORIGINS: List[str] = ["*"]

    # Blob storage
    STORAGE_ROOT: str = "./storage"
    STORAGE_BUCKET: str = "cityfix-reports"
    MAX_UPLOAD_BYTES: int = 5242880
    SIGNED_URL_TTL_SECONDS: int = 31536000

    # Start-up provisioning
    BOOTSTRAP_ON_STARTUP: bool = True
    ADMIN_EMAIL: str = "admin@example.com"
    ADMIN_PASSWORD: str = "ChangeMe123"
    ADMIN_NAME: str = "Admin User"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )


settings = Settings()
