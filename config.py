from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    # Database (обязательный, без значения по умолчанию)
    DATABASE_URL: str

    # Dashboard
    DASHBOARD_PASSWORD: str
    SECRET_KEY: str
    TOKEN_TTL_SECONDS: int = 12 * 60 * 60

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 5000
    CORS_ORIGINS: str = "*"
    MAX_BODY_SIZE: int = 50 * 1024 * 1024

    # Uploads
    UPLOAD_DIR: str = "uploads"
    UPLOAD_RETENTION_HOURS: int = 24
    SWEEP_INTERVAL_MINUTES: int = 60

    LOG_LEVEL: str = "INFO"

    @property
    def upload_path(self) -> Path:
        """Каталог для загруженных файлов"""
        return Path(self.UPLOAD_DIR).resolve()

    @property
    def cors_origins(self) -> List[str]:
        """
        Список разрешенных origin.
        Формат: "https://a.example,https://b.example" или "*"
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
