from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from pydantic import field_validator

class Settings(BaseSettings):
    # Database settings
    POSTGRES_USER: str = 'voya_user'
    POSTGRES_PASSWORD: str = 'voya_pass'
    POSTGRES_DB: str = 'voya_db'
    POSTGRES_HOST: str = 'postgres'
    POSTGRES_PORT: int = 5432
    DATABASE_URL: Optional[str] = None  # Overrides the POSTGRES_* settings when set

    # Redis settings (Celery broker/backend)
    REDIS_HOST: str = 'redis'
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: Optional[str] = None

    # Multi-tenancy
    TENANT_HEADER: str = 'X-Tenant-ID'

    # Pagination
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    # Email settings
    EMAIL_SMTP_SERVER: str = 'smtp.gmail.com'
    EMAIL_SMTP_PORT: int = 587
    EMAIL_USE_TLS: bool = True
    EMAIL_USERNAME: str = ''
    EMAIL_PASSWORD: str = ''
    EMAIL_FROM: str = ''
    EMAIL_FROM_NAME: str = 'Voya'
    FRONTEND_URL: str = 'http://localhost:3000'

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg2://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def redis_url(self) -> str:
        if self.REDIS_PASSWORD:
            return f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    model_config = SettingsConfigDict(
        extra="allow",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    @field_validator("DEBUG", "EMAIL_USE_TLS", mode="before")
    @classmethod
    def parse_bool(cls, v):
        if isinstance(v, str):
            return v.lower().strip('"').strip("'") in ("true", "1", "yes", "on")
        return bool(v)

settings = Settings()
