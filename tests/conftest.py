import pytest

from backdrop_service import config
from backdrop_service.ai_segmenter import get_segmenter


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Isolate every test from cached settings and the process-wide segmenter."""
    for name in ("DEFAULT_TOLERANCE", "SEGMENTER_BACKEND", "REMOTE_SEGMENTER_URL", "AI_TIMEOUT_SECONDS"):
        monkeypatch.delenv(name, raising=False)
    config.get_settings.cache_clear()
    get_segmenter.cache_clear()
    yield
    config.get_settings.cache_clear()
    get_segmenter.cache_clear()
