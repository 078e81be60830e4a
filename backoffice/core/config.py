# backoffice/core/config.py
import os
from urllib.parse import quote_plus

from dotenv import load_dotenv

load_dotenv()


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    APP_NAME: str = os.getenv("APP_NAME", "Property Back Office API")
    ENV: str = os.getenv("ENV", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # DB
    DATABASE_URL: str = os.getenv("DATABASE_URL")
    DB_HOST: str = os.getenv("DB_HOST", "localhost")
    DB_PORT: str = os.getenv("DB_PORT", "5432")
    DB_NAME: str = os.getenv("DB_NAME", "backoffice")
    DB_USER: str = os.getenv("DB_USER", "postgres")
    DB_PASSWORD: str = os.getenv("DB_PASSWORD", "postgres")
    DB_SSLMODE: str = os.getenv("DB_SSLMODE", "prefer")

    # AUTH
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "change-me")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_EXPIRE_MINUTES: int = int(os.getenv("JWT_EXPIRE_MINUTES", "60"))

    # BLOB STORE (S3 / MinIO)
    S3_ENDPOINT: str = os.getenv("S3_ENDPOINT", "localhost:9000")
    S3_PUBLIC_ENDPOINT: str = os.getenv("S3_PUBLIC_ENDPOINT")
    S3_ACCESS_KEY: str = os.getenv("S3_ACCESS_KEY", "minioadmin")
    S3_SECRET_KEY: str = os.getenv("S3_SECRET_KEY", "minioadmin")
    S3_BUCKET: str = os.getenv("S3_BUCKET", "backoffice-attachments")
    S3_REGION: str = os.getenv("S3_REGION", "us-east-1")
    S3_USE_SSL: bool = _as_bool(os.getenv("S3_USE_SSL", "false"))
    S3_UPLOAD_URL_EXPIRY: int = int(os.getenv("S3_UPLOAD_URL_EXPIRY", "900"))
    S3_DOWNLOAD_URL_EXPIRY: int = int(os.getenv("S3_DOWNLOAD_URL_EXPIRY", "3600"))

    # THUMBNAILS
    THUMBNAIL_MAX_SIZE: int = int(os.getenv("THUMBNAIL_MAX_SIZE", "300"))
    HTTP_TIMEOUT: int = int(os.getenv("HTTP_TIMEOUT", "10"))

    # FRONTEND
    FRONTEND_BASE_URL: str = os.getenv(
        "FRONTEND_BASE_URL",
        "http://localhost:4200"
    )

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL

        # URL-encode password to handle special characters like @ $ !
        encoded_password = quote_plus(self.DB_PASSWORD)
        return (
            f"postgresql+psycopg2://{self.DB_USER}:"
            f"{encoded_password}@"
            f"{self.DB_HOST}:"
            f"{self.DB_PORT}/"
            f"{self.DB_NAME}"
            f"?sslmode={self.DB_SSLMODE}"
        )

    @property
    def is_development(self) -> bool:
        return self.ENV == "development"


settings = Settings()
