"""
Back office configuration.

Every value can be overridden from the environment or a .env file at the
project root.
"""

from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

load_dotenv()

PROJECT_ROOT = Path(__file__).parent.parent


class Settings(BaseSettings):
    """Back office settings."""

    # Storage
    DATABASE_URL: str = Field(default=f"sqlite:///{PROJECT_ROOT}/data/backoffice.db")
    DATA_DIR: str = Field(default="data")

    # Logging
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO")
    LOG_DIR: str = Field(default="logs")
    LOG_TO_FILE: bool = Field(default=True)

    # Import matching: where unmatched and low-confidence rows are written
    REVIEW_QUEUE_PATH: str = Field(default="data/import_review_queue.csv")

    # Duplicate review: minimum rapidfuzz score (0-100) for a name pair
    DUPLICATE_NAME_THRESHOLD: int = Field(default=90, ge=0, le=100)

    # Wealth simulator market rates, percent per year
    SELIC_RATE: float = Field(default=13.25)
    IPCA_RATE: float = Field(default=4.5)

    def resolve_path(self, relative: str) -> Path:
        """Project-relative path for a configured directory or file."""
        path = Path(relative)
        return path if path.is_absolute() else PROJECT_ROOT / path

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite:///")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
