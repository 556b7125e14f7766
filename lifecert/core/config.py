# lifecert/core/config.py

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    SYSTEM_NAME: str = "Life Certificate System"

    # --- JWT Config ---
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    MIN_PASSWORD_LENGTH: int = 6

    # --- Database Config ---
    DB_HOST: str
    DB_PORT: int
    DB_NAME: str
    DB_USER: str
    DB_PASS: str
    DB_ACQUIRE_TIMEOUT: float = 30.0
    SPARE_CONNECTION_TIMEOUT: float = 0.5

    # --- Media storage ---
    MEDIA_ROOT: str = "media"
    MEDIA_URL: str = "/media"
    PUBLIC_BASE_URL: str = "http://localhost:8000"

    # --- Seed admin ---
    ADMIN_EMAIL: str = "admin@lifecert.org"
    ADMIN_PASSWORD: str = "admin123"
    ADMIN_FULL_NAME: str = "System Administrator"

    LOG_LEVEL: str = "INFO"

    @property
    def database_url(self) -> str:
        return (
            f"postgresql+asyncpg://"
            f"{self.DB_USER}:{self.DB_PASS}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    @property
    def asyncpg_url(self) -> str:
        return (
            f"postgresql://"
            f"{self.DB_USER}:{self.DB_PASS}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    @property
    def media_public_url(self) -> str:
        return self.PUBLIC_BASE_URL.rstrip("/") + "/" + self.MEDIA_URL.strip("/")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
