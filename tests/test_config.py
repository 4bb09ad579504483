"""Tests for settings validation."""

import pytest

from thumbnail_service.config import Settings, _parse_weights


def test_parse_weights():
    assert _parse_weights("500, 700,") == (500, 700)


def test_defaults_are_valid():
    settings = Settings()
    assert settings.thumbnail_width > 0
    assert settings.font_weights


def test_redis_backend_flag():
    assert Settings(font_cache_backend="redis").uses_redis is True
    assert Settings(font_cache_backend="disk").uses_redis is False


@pytest.mark.parametrize(
    "overrides",
    [
        {"font_cache_backend": "s3"},
        {"font_weights": ()},
        {"font_weights": (0,)},
        {"font_weights": (1200,)},
        {"font_fetch_timeout": 0},
        {"thumbnail_width": 0},
    ],
)
def test_invalid_settings_rejected(overrides):
    with pytest.raises(ValueError):
        Settings(**overrides)
