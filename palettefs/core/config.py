"""Application configuration with validation."""

from enum import Enum
from pathlib import Path
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import List

_PACKAGE_DIR = Path(__file__).resolve().parent.parent


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class StoreBackend(str, Enum):
    """Key-value store implementations selectable at startup."""
    MEMORY = "memory"
    SQL = "sql"


class ConfigurationError(Exception):
    """Raised when application configuration is invalid for the environment."""
    pass


class Settings(BaseSettings):
    """
    Application settings with validation.

    Every field can be overridden with an environment variable of the same
    name (case-insensitive) or through a ``.env`` file.
    """

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production)"
    )

    # CORS Configuration
    cors_allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:3001",
        description="Allowed CORS origins (comma-separated)"
    )

    # Store Configuration
    # memory: records vanish on restart (tests, demos).
    # sql:    records live in the kv_entries table at DATABASE_URL.
    store_backend: StoreBackend = Field(
        default=StoreBackend.SQL,
        description="Key-value store backing user files (memory/sql)"
    )
    database_url: str = Field(
        default="sqlite:///./palettefs.db",
        description="Database connection URL for the sql store backend"
    )

    # Key namespace inside the store. Changing either value orphans every
    # record written under the old names.
    metadata_key: str = Field(
        default="fileSystem",
        description="Store key holding the {nextId} metadata record"
    )
    file_key_prefix: str = Field(
        default="file_",
        description="Prefix for per-file store keys (prefix + numeric id)"
    )

    # Number of compare-and-set attempts when allocating a file id before
    # giving up with PersistenceError.
    id_allocation_retries: int = Field(
        default=5,
        description="Attempts to advance the id counter under contention"
    )

    # When a stored folderPath is not part of the built-in catalog, recreate
    # that folder (true) or attach the file to the first root folder (false).
    recreate_missing_folders: bool = Field(
        default=True,
        description="Recreate user folders missing from the catalog on reload"
    )

    # Built-in content
    catalog_path: str = Field(
        default=str(_PACKAGE_DIR / "fixtures" / "builtin_catalog.json"),
        description="JSON fixture describing the built-in folder catalog"
    )
    resource_root: str = Field(
        default=str(_PACKAGE_DIR / "fixtures" / "resources"),
        description="Directory that built-in resource locators are relative to"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="json",
        description="Log output format: 'json' for structured, 'text' for human-readable"
    )

    def get_cors_origins(self) -> List[str]:
        """
        Get CORS origins as a list.

        Parses comma-separated string and validates no wildcards.
        """
        origins = [origin.strip() for origin in self.cors_allowed_origins.split(',') if origin.strip()]

        if "*" in origins:
            raise ValueError(
                "Wildcard CORS (*) not allowed. "
                "Specify explicit origins in CORS_ALLOWED_ORIGINS"
            )

        return origins

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard Python logging levels."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v_upper

    @field_validator('file_key_prefix', 'metadata_key')
    @classmethod
    def validate_key(cls, v: str) -> str:
        if not v:
            raise ValueError("Store keys cannot be empty")
        return v

    @field_validator('id_allocation_retries')
    @classmethod
    def validate_retries(cls, v: int) -> int:
        if v < 1:
            raise ValueError("id_allocation_retries must be at least 1")
        return v

    def validate_production_config(self) -> None:
        """Validate configuration for production environment.

        Raises:
            ConfigurationError: If production config would lose user files.
        """
        errors: list[str] = []

        if self.store_backend == StoreBackend.MEMORY:
            errors.append(
                "STORE_BACKEND is 'memory'. "
                "User files are discarded on every restart."
            )

        if self.metadata_key.startswith(self.file_key_prefix):
            errors.append(
                f"METADATA_KEY '{self.metadata_key}' collides with "
                f"FILE_KEY_PREFIX '{self.file_key_prefix}'."
            )

        if errors and self.environment == Environment.PRODUCTION:
            raise ConfigurationError(
                "Production configuration is unsafe:\n  - " + "\n  - ".join(errors)
            )

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()
