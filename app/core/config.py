import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from app.core.errors import ConfigurationError

load_dotenv()

# Fixed by the gallery layout (4 columns x 3 rows)
PAGE_SIZE = 12


class Settings(BaseModel):
    cloudinary_cloud_name: str
    cloudinary_api_key: str
    cloudinary_api_secret: str
    cloudinary_upload_preset: Optional[str] = None
    gallery_tag: str = "mariage"

    secret_key: str
    access_code: Optional[str] = None
    access_code_hash: Optional[str] = None

    frontend_url: str = "http://localhost:3000"
    session_ttl_minutes: int = 60
    welcome_seconds: float = 5.0
    media_store_timeout: float = 15.0
    log_level: str = "INFO"

    @property
    def session_ttl_seconds(self) -> int:
        return self.session_ttl_minutes * 60


def _missing(*names: str) -> list[str]:
    return [name for name in names if not os.getenv(name)]


@lru_cache
def get_settings() -> Settings:
    missing = _missing(
        "CLOUDINARY_CLOUD_NAME",
        "CLOUDINARY_API_KEY",
        "CLOUDINARY_API_SECRET",
        "SECRET_KEY",
    )
    if missing:
        raise ConfigurationError(f"Missing environment variables: {', '.join(missing)}")

    if not os.getenv("GALLERY_ACCESS_CODE") and not os.getenv("GALLERY_ACCESS_CODE_HASH"):
        raise ConfigurationError(
            "GALLERY_ACCESS_CODE or GALLERY_ACCESS_CODE_HASH must be set"
        )

    return Settings(
        cloudinary_cloud_name=os.environ["CLOUDINARY_CLOUD_NAME"],
        cloudinary_api_key=os.environ["CLOUDINARY_API_KEY"],
        cloudinary_api_secret=os.environ["CLOUDINARY_API_SECRET"],
        cloudinary_upload_preset=os.getenv("CLOUDINARY_UPLOAD_PRESET") or None,
        gallery_tag=os.getenv("GALLERY_TAG", "mariage"),
        secret_key=os.environ["SECRET_KEY"],
        access_code=os.getenv("GALLERY_ACCESS_CODE") or None,
        access_code_hash=os.getenv("GALLERY_ACCESS_CODE_HASH") or None,
        frontend_url=os.getenv("FRONTEND_URL", "http://localhost:3000"),
        session_ttl_minutes=int(os.getenv("SESSION_TTL_MINUTES", "60")),
        welcome_seconds=float(os.getenv("WELCOME_SECONDS", "5")),
        media_store_timeout=float(os.getenv("MEDIA_STORE_TIMEOUT", "15")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
