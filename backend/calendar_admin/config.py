"""Application settings loaded from environment variables.

Settings are read from the process environment or ``backend/.env``.
"""

from pathlib import Path
from typing import List, Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL, make_url


class ConfigurationError(RuntimeError):
    """Raised when required settings are missing at startup."""


REQUIRED_DB_PARTS = ("DB_HOST", "DB_USER", "DB_PASSWORD", "DB_NAME")


class Settings(BaseSettings):
    APP_TITLE: str = "School Calendar Admin"
    DEBUG: bool = False

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    ALLOWED_ORIGINS: List[str] = ["*"]

    # Storage: "sql" uses the relational table, "json" a single document file
    STORAGE_BACKEND: Literal["sql", "json"] = "sql"
    EVENTS_JSON_PATH: str = "data/events.json"

    # Database. DATABASE_URL wins over the individual parts.
    DATABASE_URL: Optional[str] = None
    DB_DRIVER: str = "postgresql+psycopg2"
    DB_HOST: Optional[str] = None
    DB_USER: Optional[str] = None
    DB_PASSWORD: Optional[str] = None
    DB_NAME: Optional[str] = None
    DB_PORT: int = 5432
    DB_SSL: bool = False

    # Admin page
    ADMIN_PAGE_SIZE: int = 20
    ADMIN_MAX_PAGE_SIZE: int = 100

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    model_config = SettingsConfigDict(
        # Load backend/.env regardless of the working directory.
        env_file=str(Path(__file__).resolve().parents[1] / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def missing_database_settings(self) -> List[str]:
        if self.STORAGE_BACKEND != "sql" or self.DATABASE_URL:
            return []
        return [name for name in REQUIRED_DB_PARTS if not getattr(self, name)]

    def database_url(self) -> URL:
        """Resolve the SQLAlchemy URL, raising ConfigurationError when incomplete."""
        if self.DATABASE_URL:
            return make_url(self.DATABASE_URL)
        missing = self.missing_database_settings()
        if missing:
            raise ConfigurationError(f"missing required environment variables: {', '.join(missing)}")
        query = {}
        if self.DB_SSL and self.DB_DRIVER.startswith("postgresql"):
            query["sslmode"] = "require"
        return URL.create(
            self.DB_DRIVER,
            username=self.DB_USER,
            password=self.DB_PASSWORD,
            host=self.DB_HOST,
            port=self.DB_PORT,
            database=self.DB_NAME,
            query=query,
        )

    def validate_required(self) -> None:
        if self.STORAGE_BACKEND == "sql":
            self.database_url()


settings = Settings()
