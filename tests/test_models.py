import pytest
from pydantic import ValidationError

from tiktok_scraper_pkg.models import DelayRange, ScrapeConfig, Viewport


def test_defaults():
    config = ScrapeConfig(username="pubity")
    assert config.max_videos == 300
    assert config.delay_range == DelayRange(min_ms=1000, max_ms=4000)
    assert config.viewport == Viewport(width=1920, height=1080)


@pytest.mark.parametrize("raw,expected", [("@pubity", "pubity"), ("  pubity ", "pubity")])
def test_username_is_normalized(raw, expected):
    assert ScrapeConfig(username=raw).username == expected


@pytest.mark.parametrize("bad", ["", "@", "a/b", "two words"])
def test_bad_usernames_rejected(bad):
    with pytest.raises(ValidationError):
        ScrapeConfig(username=bad)


def test_delay_bounds_must_be_ordered():
    with pytest.raises(ValidationError):
        DelayRange(min_ms=5000, max_ms=1000)


def test_config_is_immutable():
    config = ScrapeConfig(username="pubity")
    with pytest.raises(ValidationError):
        config.max_videos = 5


def test_max_videos_must_be_positive():
    with pytest.raises(ValidationError):
        ScrapeConfig(username="pubity", max_videos=0)
