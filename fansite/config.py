"""Fan-site backend configuration via pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Security
    SECRET_KEY: str = "change-me"
    REFRESH_SECRET_KEY: str = "change-me-too"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    BCRYPT_ROUNDS: int = 12

    # Refresh cookie
    REFRESH_COOKIE_NAME: str = "refreshToken"

    # Uploads and streaming
    UPLOAD_DIR: str = "./data/uploads"
    MAX_UPLOAD_BYTES: int = 500 * 1024 * 1024
    UPLOAD_CHUNK_SIZE: int = 1024 * 1024
    STREAM_CHUNK_SIZE: int = 1024 * 1024

    # YouTube metadata lookups (yt-dlp socket timeout, seconds)
    YOUTUBE_LOOKUP_TIMEOUT: int = 15

    # Seed data
    SEED_DEMO_DATA: bool = True
    DEFAULT_ADMIN_EMAIL: str = "admin@tlou2.com"
    DEFAULT_ADMIN_PASSWORD: str = "admin123!"
    DEMO_USER_PASSWORD: str = "admin123!"

    # CORS, comma separated
    CORS_ORIGINS: str = "http://localhost:4200,http://localhost:3000"

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
