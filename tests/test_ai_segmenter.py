import sys

import pytest
import requests

from backdrop_service import ai_segmenter, config
from backdrop_service.ai_segmenter import (
    RembgSegmenter,
    RemoteSegmenter,
    build_segmenter,
    get_segmenter,
    run_segmenter,
)
from backdrop_service.errors import AISegmentationFailed

from .helpers import StubSegmenter


def test_success_returns_backend_output():
    stub = StubSegmenter(output=b"cutout")
    assert run_segmenter(stub, b"input") == b"cutout"
    assert stub.calls == 1


def test_backend_error_is_converted_and_chained():
    boom = RuntimeError("model exploded")
    stub = StubSegmenter(error=boom)

    with pytest.raises(AISegmentationFailed) as excinfo:
        run_segmenter(stub, b"input")

    assert "model exploded" in str(excinfo.value)
    assert excinfo.value.__cause__ is boom
    assert stub.calls == 1


def test_empty_output_counts_as_failure():
    with pytest.raises(AISegmentationFailed):
        run_segmenter(StubSegmenter(output=b""), b"input")


def test_timeout_counts_as_failure():
    stub = StubSegmenter(output=b"late", delay=0.5)

    with pytest.raises(AISegmentationFailed, match="timed out"):
        run_segmenter(stub, b"input", timeout=0.05)


def test_call_within_timeout_succeeds():
    assert run_segmenter(StubSegmenter(output=b"ok"), b"input", timeout=5) == b"ok"


def test_remote_segmenter_posts_image(monkeypatch):
    captured = {}

    class FakeResponse:
        content = b"remote-png"

        def raise_for_status(self):
            return None

    def fake_post(url, files, timeout):
        captured["url"] = url
        captured["body"] = files["image"][1]
        captured["timeout"] = timeout
        return FakeResponse()

    monkeypatch.setattr(ai_segmenter.requests, "post", fake_post)

    seg = RemoteSegmenter("http://segmenter.local/remove", timeout_seconds=12)
    assert run_segmenter(seg, b"raw") == b"remote-png"
    assert captured == {"url": "http://segmenter.local/remove", "body": b"raw", "timeout": (5, 12)}


def test_remote_http_error_becomes_ai_failure(monkeypatch):
    def fake_post(url, files, timeout):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(ai_segmenter.requests, "post", fake_post)

    with pytest.raises(AISegmentationFailed, match="connection refused"):
        run_segmenter(RemoteSegmenter("http://nowhere.invalid"), b"raw")


def test_build_segmenter_follows_settings(monkeypatch):
    monkeypatch.setenv("SEGMENTER_BACKEND", "remote")
    monkeypatch.setenv("REMOTE_SEGMENTER_URL", "http://segmenter.local/remove")
    monkeypatch.setenv("AI_TIMEOUT_SECONDS", "7")

    seg = build_segmenter(config.get_settings())

    assert isinstance(seg, RemoteSegmenter)
    assert seg.url == "http://segmenter.local/remove"
    assert seg.timeout_seconds == 7


def test_default_segmenter_is_rembg_and_cached():
    seg = get_segmenter()
    assert isinstance(seg, RembgSegmenter)
    assert seg.model_name == "u2net"
    assert get_segmenter() is seg


def test_missing_rembg_becomes_ai_failure(monkeypatch):
    monkeypatch.setitem(sys.modules, "rembg", None)

    with pytest.raises(AISegmentationFailed, match="rembg") as excinfo:
        run_segmenter(RembgSegmenter(), b"input")

    assert isinstance(excinfo.value.__cause__, ImportError)
