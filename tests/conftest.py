import pytest
from fastapi.testclient import TestClient

from pulsehr.core.config import get_settings
from pulsehr.main import create_app

API_KEY = "test_key"


@pytest.fixture
def test_client(tmp_path, monkeypatch):
    """
    TestClient on a fresh SQLite file, AI disabled (fallback payloads).
    """
    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.setenv("APP_NAME", "PulseHR API (tests)")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'test.db'}")
    monkeypatch.setenv("MAX_UPLOAD_MB", "1")  # small limit for tests
    monkeypatch.setenv("CORS_ORIGINS", "http://localhost")
    monkeypatch.setenv("API_KEY", API_KEY)
    monkeypatch.setenv("OPENAI_API_KEY", "")
    monkeypatch.delenv("DEFAULT_ADMIN_PASSWORD", raising=False)

    # settings are cached, reload them from the patched env
    get_settings.cache_clear()

    app = create_app()
    with TestClient(app) as client:
        yield client

    get_settings.cache_clear()


@pytest.fixture
def admin_headers():
    return {"x-api-key": API_KEY}
