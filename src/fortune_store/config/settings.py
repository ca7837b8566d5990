"""
Configuration management for Fortune Store.

Environment-based configuration using Pydantic BaseSettings. Variable names
carry no prefix so the same environment drives the service, the admin CLI and
the test suite.
"""

import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fortune_store.io.database.dsn import DataSource

# Determine project root for resolving .env by default
PROJECT_ROOT = Path(__file__).resolve().parents[3]
SETTINGS_ENV_FILE = Path(
    os.getenv("FORTUNE_ENV_FILE", str(PROJECT_ROOT / ".env"))
).expanduser()


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Fields:
    - DATABASE_DRIVER: SQLAlchemy driver name (mysql+pymysql)
    - DATABASE_HOST / DATABASE_PORT / DATABASE_USER / DATABASE_PASSWORD
    - DATABASE_NAME: Database the service reads and writes
    - INSTANCE_ID: Identifier of this process in query logs
    - LOG_LEVEL / LOG_DEV_MODE: Logging configuration
    - TEST_DATABASE_NAME / TEST_DATABASE_COUNT: Test database pool layout
    """

    DATABASE_DRIVER: str = Field(
        default="mysql+pymysql",
        validation_alias="DATABASE_DRIVER",
        description="SQLAlchemy dialect+driver",
    )
    DATABASE_HOST: str = Field(
        default="localhost",
        validation_alias="DATABASE_HOST",
        description="Database server host",
    )
    DATABASE_PORT: int = Field(
        default=3306,
        validation_alias="DATABASE_PORT",
        description="Database server port",
    )
    DATABASE_USER: str = Field(
        default="root",
        validation_alias="DATABASE_USER",
        description="Database user",
    )
    DATABASE_PASSWORD: str = Field(
        default="example",
        validation_alias="DATABASE_PASSWORD",
        description="Database password (never serialized)",
        exclude=True,
        repr=False,
    )
    DATABASE_NAME: str = Field(
        default="fortune_db",
        validation_alias="DATABASE_NAME",
        description="Database name",
    )
    INSTANCE_ID: str = Field(
        default="",
        validation_alias="INSTANCE_ID",
        description="Instance identifier used for query log correlation",
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level (uppercase)",
    )
    LOG_DEV_MODE: bool = Field(
        default=False,
        validation_alias="LOG_DEV_MODE",
        description="Render logs for the console instead of JSON",
    )
    TEST_DATABASE_NAME: str = Field(
        default="fortune_mysql_test",
        validation_alias="TEST_DATABASE_NAME",
        description="Base name of the pooled test databases",
    )
    TEST_DATABASE_COUNT: int = Field(
        default=4,
        ge=1,
        validation_alias="TEST_DATABASE_COUNT",
        description="Number of pooled test databases",
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid LOG_LEVEL: {value}")
        return value

    def data_source(self) -> DataSource:
        """Locator for the configured database.

        With a SQLite driver DATABASE_NAME is the database file path.
        """
        if self.DATABASE_DRIVER.startswith("sqlite"):
            return DataSource(
                driver=self.DATABASE_DRIVER,
                host=None,
                port=None,
                user=None,
                database=self.DATABASE_NAME,
                query={},
            )
        return DataSource(
            driver=self.DATABASE_DRIVER,
            host=self.DATABASE_HOST,
            port=self.DATABASE_PORT,
            user=self.DATABASE_USER,
            password=self.DATABASE_PASSWORD,
            database=self.DATABASE_NAME,
            query={"charset": "utf8mb4"} if self.DATABASE_DRIVER.startswith("mysql") else {},
        )

    model_config = SettingsConfigDict(
        env_file=str(SETTINGS_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance with loaded configuration
    """
    return Settings()
