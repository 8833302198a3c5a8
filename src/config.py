import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).parent

# Containers get their settings from the environment, never from a .env file
if os.getenv("APP_ENV", "development") != "production":
    load_dotenv(BASE_DIR.parent / ".env")


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class BaseConfig:
    """
    Base configuration class for the media server.

    Paths, rebuild scheduling and the login password are read from the environment; the
    media extension sets are fixed here and shared by the scanner and the watcher.
    """
    MEDIA_ROOT = Path(os.getenv("MEDIA_ROOT", "/data/media"))
    DATA_ROOT = Path(os.getenv("DATA_ROOT", BASE_DIR / "collection-data"))
    CACHE_PATH = Path(os.getenv("CACHE_PATH", MEDIA_ROOT / ".catalog.pickle.gz"))
    REBUILD_INTERVAL = float(os.getenv("REBUILD_INTERVAL", "120"))
    WATCH_CHANGES = _env_flag("WATCH_CHANGES")
    PASSWORD = os.getenv("APP_PASSWORD", "dev-password")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    START_TRIGGERS = True

    AUDIO_EXTENSIONS = frozenset(
        {".flac", ".m4a", ".mid", ".midi", ".mp3", ".ogg", ".wav", ".wave"}
    )
    VIDEO_EXTENSIONS = frozenset(
        {".avi", ".m4v", ".mkv", ".mov", ".mp4", ".mpeg", ".mpg", ".ogv", ".webm"}
    )

    @classmethod
    def ensure_dirs(cls):
        """
        Ensures that the data directory for logs and indexing status exists.
        """
        cls.DATA_ROOT.mkdir(parents=True, exist_ok=True)


class DevelopmentConfig(BaseConfig):
    DEBUG = True


class TestConfig(BaseConfig):
    TESTING = True
    PASSWORD = "test-password"
    START_TRIGGERS = False


class ProductionConfig(BaseConfig):
    DEBUG = False
    WATCH_CHANGES = _env_flag("WATCH_CHANGES", "true")
