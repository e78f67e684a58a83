"""
Tests for settings loading.
"""

import pytest

from flowpieces.config import AppSettings, get_settings
from flowpieces.pieces.kommo import create_client as create_kommo_client
from flowpieces.pieces.zagomail import create_client as create_zagomail_client


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("FLOWPIECES_HTTP_TIMEOUT", "FLOWPIECES_LOG_HTTP", "FLOWPIECES_KOMMO_DOMAIN"):
            monkeypatch.delenv(name, raising=False)

        settings = get_settings()

        assert settings.http_timeout == 30.0
        assert settings.log_http is False
        assert settings.kommo_domain == "kommo.com"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("FLOWPIECES_HTTP_TIMEOUT", "5")
        monkeypatch.setenv("FLOWPIECES_LOG_HTTP", "yes")
        monkeypatch.setenv("FLOWPIECES_LOG_LEVEL", "debug")

        settings = get_settings()

        assert settings.http_timeout == 5.0
        assert settings.log_http is True
        assert settings.log_level == "DEBUG"

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValueError):
            AppSettings(http_timeout=0)

    def test_default_factories_use_settings(self, monkeypatch):
        monkeypatch.setenv("FLOWPIECES_HTTP_TIMEOUT", "7")
        monkeypatch.setenv("FLOWPIECES_KOMMO_DOMAIN", "amocrm.ru")
        monkeypatch.setenv("FLOWPIECES_ZAGOMAIL_BASE_URL", "https://z.example/")

        kommo = create_kommo_client(
            {"access_token": "t", "props": {"account_subdomain": "acme"}}
        )
        zagomail = create_zagomail_client({"publicKey": "k"})

        assert kommo.config.base_url == "https://acme.amocrm.ru"
        assert kommo.config.timeout == 7.0
        assert zagomail.config.base_url == "https://z.example"
