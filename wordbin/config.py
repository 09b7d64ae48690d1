"""
Configuration module for WordBin.
Loads environment variables and provides config objects.
"""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class Settings:
    """Application settings loaded from environment variables."""

    DATA_DIR: str = os.getenv("DATA_DIR", "./pasta_data")
    SNAPSHOT_FILE: str = os.getenv("SNAPSHOT_FILE", "")
    PERSISTENCE_BACKEND: str = os.getenv("PERSISTENCE_BACKEND", "file")
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    REDIS_SNAPSHOT_KEY: str = os.getenv("REDIS_SNAPSHOT_KEY", "wordbin:snapshot")
    HOST: str = os.getenv("HOST", "127.0.0.1")
    PORT: int = int(os.getenv("PORT", "8080"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    DEBUG: bool = _flag("DEBUG", "False")
    # Ids are drawn from [0, 2**ID_BITS); 16 bits keeps them at three animals.
    ID_BITS: int = int(os.getenv("ID_BITS", "16"))
    UNIQUE_IDS: bool = _flag("UNIQUE_IDS", "True")
    # 0 disables the background sweeper; expired pastes are still dropped on access.
    SWEEP_INTERVAL_SECONDS: float = float(os.getenv("SWEEP_INTERVAL_SECONDS", "0"))

    @property
    def snapshot_path(self) -> str:
        return self.SNAPSHOT_FILE or os.path.join(self.DATA_DIR, "database.json")

    @property
    def files_dir(self) -> str:
        return self.DATA_DIR


settings = Settings()
