import os
import tempfile
from pathlib import Path

# Basic settings helper to read environment configuration.


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


_DEFAULT_DB_PATH = Path(__file__).resolve().parent / "app.db"


class Settings:
    def __init__(self) -> None:
        self.DATABASE_URL: str = os.getenv("DATABASE_URL", f"sqlite:///{_DEFAULT_DB_PATH}")
        self.SQL_ECHO: bool = _as_bool(os.getenv("SQL_ECHO"), False)
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
        self.FRONTEND_DOMAIN: str = os.getenv("FRONTEND_DOMAIN", "*")

        # Asset store: "local" (media tree served under /media) or "cloudinary"
        self.ASSET_STORE: str = os.getenv("ASSET_STORE", "local").lower()
        self.MEDIA_ROOT: str = os.getenv("MEDIA_ROOT", "media")
        self.PUBLIC_BASE_URL: str = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000").rstrip("/")
        self.CLOUDINARY_CLOUD_NAME: str | None = os.getenv("CLOUDINARY_CLOUD_NAME")
        self.CLOUDINARY_API_KEY: str | None = os.getenv("CLOUDINARY_API_KEY")
        self.CLOUDINARY_API_SECRET: str | None = os.getenv("CLOUDINARY_API_SECRET")
        self.CLOUDINARY_FOLDER: str = os.getenv("CLOUDINARY_FOLDER", "elib")
        self.ASSET_STORE_TIMEOUT: float = float(os.getenv("ASSET_STORE_TIMEOUT", "30"))

        # Multipart uploads are staged here for the duration of one request
        self.UPLOAD_TMP_DIR: str = os.getenv(
            "UPLOAD_TMP_DIR", os.path.join(tempfile.gettempdir(), "elib-uploads")
        )
        self.MAX_UPLOAD_MB: float = float(os.getenv("MAX_UPLOAD_MB", "10"))


settings = Settings()
