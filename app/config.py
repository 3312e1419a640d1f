from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    # App
    APP_NAME: str = "Drive"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "production"
    DEBUG: bool = False
    API_V1_PREFIX: str = "/api/v1"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Database
    DATABASE_URL: str
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 10
    AUTO_CREATE_TABLES: bool = True

    # Identity provider (bearer tokens + webhooks)
    IDENTITY_JWT_KEY: str
    IDENTITY_JWT_ALGORITHM: str = "HS256"
    IDENTITY_JWT_AUDIENCE: str | None = None
    IDENTITY_JWT_ISSUER: str | None = None
    IDENTITY_WEBHOOK_SECRET: str = ""

    # Blob storage: "s3" (any S3-compatible store, e.g. Backblaze B2) or "local"
    STORAGE_BACKEND: str = "s3"
    BLOB_ACCESS_KEY_ID: str | None = None
    BLOB_SECRET_ACCESS_KEY: str | None = None
    BLOB_BUCKET_NAME: str | None = None
    BLOB_ENDPOINT_URL: str | None = None
    BLOB_REGION: str = "us-west-004"
    BLOB_PUBLIC_BASE_URL: str | None = None
    LOCAL_STORAGE_DIR: str = "storage"

    # Public links
    PUBLIC_BASE_URL: str | None = None

    # Security
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]
    ALLOWED_HOSTS: List[str] = ["*"]
    RATE_LIMIT_PER_MINUTE: int = 60
    MAX_UPLOAD_SIZE_MB: int = 15
    MAX_PAGE_SIZE: int = 100
    SEARCH_RESULT_LIMIT: int = 20

    # Monitoring
    SENTRY_DSN: str = ""
    SLOW_REQUEST_SECONDS: float = 1.0

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
