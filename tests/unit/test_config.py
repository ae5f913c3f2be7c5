"""Unit tests for environment-driven settings."""

import pytest

from app.core.config import PAGE_SIZE, get_settings
from app.core.errors import ConfigurationError

REQUIRED = {
    "CLOUDINARY_CLOUD_NAME": "demo",
    "CLOUDINARY_API_KEY": "key",
    "CLOUDINARY_API_SECRET": "secret",
    "SECRET_KEY": "signing-key",
    "GALLERY_ACCESS_CODE": "code",
}


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        *REQUIRED,
        "GALLERY_ACCESS_CODE_HASH",
        "GALLERY_TAG",
        "CLOUDINARY_UPLOAD_PRESET",
        "SESSION_TTL_MINUTES",
        "WELCOME_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def _set_required(monkeypatch, **overrides):
    for name, value in {**REQUIRED, **overrides}.items():
        if value is None:
            monkeypatch.delenv(name, raising=False)
        else:
            monkeypatch.setenv(name, value)


class TestSettings:
    def test_defaults(self, monkeypatch):
        _set_required(monkeypatch)

        settings = get_settings()

        assert settings.gallery_tag == "mariage"
        assert settings.cloudinary_upload_preset is None
        assert settings.session_ttl_seconds == 3600
        assert settings.welcome_seconds == 5.0

    def test_overrides(self, monkeypatch):
        _set_required(monkeypatch)
        monkeypatch.setenv("GALLERY_TAG", "wedding")
        monkeypatch.setenv("SESSION_TTL_MINUTES", "10")

        settings = get_settings()

        assert settings.gallery_tag == "wedding"
        assert settings.session_ttl_seconds == 600

    def test_missing_credentials(self, monkeypatch):
        _set_required(monkeypatch, CLOUDINARY_API_SECRET=None)

        with pytest.raises(ConfigurationError, match="CLOUDINARY_API_SECRET"):
            get_settings()

    def test_missing_access_code(self, monkeypatch):
        _set_required(monkeypatch, GALLERY_ACCESS_CODE=None)

        with pytest.raises(ConfigurationError):
            get_settings()

    def test_hash_alone_is_enough(self, monkeypatch):
        _set_required(monkeypatch, GALLERY_ACCESS_CODE=None)
        monkeypatch.setenv("GALLERY_ACCESS_CODE_HASH", "$2b$12$abc")

        assert get_settings().access_code_hash == "$2b$12$abc"

    def test_page_size_is_fixed(self):
        assert PAGE_SIZE == 12
