import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_STORE = "data/store.json"


def load_env() -> None:
    """Load .env from the working directory if present."""
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path)


def store_path() -> str:
    return os.getenv("SMARTFORM_STORE", DEFAULT_STORE)


def db_path() -> Optional[str]:
    return os.getenv("SMARTFORM_DB") or None


def log_level() -> str:
    return os.getenv("SMARTFORM_LOG_LEVEL", "INFO")
