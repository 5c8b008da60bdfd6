import pytest

from backdrop_service import config
from backdrop_service.assets import load_background, resolve_background
from backdrop_service.errors import AssetNotFound


def test_defaults():
    settings = config.get_settings()

    assert settings.default_tolerance == 40
    assert settings.tint_rgb == (102, 212, 255)
    assert settings.default_tint_factor == pytest.approx(0.2)
    assert settings.segmenter_backend == "rembg"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("DEFAULT_TOLERANCE", "12.5")
    monkeypatch.setenv("SEGMENTER_BACKEND", "REMBG")

    settings = config.get_settings()

    assert settings.default_tolerance == 12.5
    assert settings.segmenter_backend == "rembg"


@pytest.mark.parametrize(
    "name,value",
    [("DEFAULT_TOLERANCE", "-1"), ("DEFAULT_TINT_FACTOR", "1.5"), ("DEFAULT_TINT_COLOR", "blue"), ("SEGMENTER_BACKEND", "gpu")],
)
def test_invalid_values_rejected(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError):
        config.get_settings()


def test_remote_backend_requires_url(monkeypatch):
    monkeypatch.setenv("SEGMENTER_BACKEND", "remote")
    with pytest.raises(ValueError):
        config.get_settings()


@pytest.mark.parametrize(
    "value,expected",
    [("#66D4FF", (102, 212, 255)), ("00ff00", (0, 255, 0)), (" #000000 ", (0, 0, 0)), ("#fff", None), ("#zzzzzz", None), (None, None)],
)
def test_parse_hex_color(value, expected):
    assert config.parse_hex_color(value) == expected


@pytest.fixture
def assets(tmp_path):
    (tmp_path / "base").mkdir()
    (tmp_path / "base" / "background1.png").write_bytes(b"png-bytes")
    (tmp_path / "secret.txt").write_text("nope")
    return config.Settings(assets_dir=tmp_path)


def test_resolve_uses_default_project_and_background(assets):
    path = resolve_background(settings=assets)
    assert path.name == "background1.png"
    assert load_background("base", "background1.png", settings=assets) == b"png-bytes"


def test_missing_asset(assets):
    with pytest.raises(AssetNotFound):
        resolve_background("base", "background9.png", settings=assets)
    with pytest.raises(FileNotFoundError):
        load_background("premium", None, settings=assets)


def test_path_escape_rejected(assets):
    with pytest.raises(AssetNotFound):
        resolve_background("base", "../secret.txt", settings=assets)
    with pytest.raises(AssetNotFound):
        resolve_background("..", "..", settings=assets)
