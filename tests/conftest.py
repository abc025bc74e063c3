"""Shared fakes for tests that would otherwise need a real browser."""

from __future__ import annotations

from typing import Dict, List

import pytest

from tiktok_scraper_pkg.models import ApiPage


def make_page(cursor, has_more: bool, ids: List[str]) -> ApiPage:
    return ApiPage.model_validate(
        {"cursor": cursor, "hasMore": has_more, "itemList": [{"id": i} for i in ids]}
    )


class FakeFetcher:
    """Returns queued pages in order and records every requested URL."""

    def __init__(self, pages: List[ApiPage]):
        self.pages = list(pages)
        self.urls: List[str] = []

    async def __call__(self, url: str) -> ApiPage:
        self.urls.append(url)
        if not self.pages:
            raise AssertionError(f"Unexpected fetch of {url}")
        return self.pages.pop(0)


class FakeSleep:
    def __init__(self):
        self.calls = 0

    async def __call__(self, delay_range) -> float:
        self.calls += 1
        return float(delay_range.min_ms)


class FakeContext:
    def __init__(self):
        self.cookies: List[Dict] = []
        self.init_scripts: List[str] = []
        self.routes = []

    async def add_cookies(self, cookies):
        self.cookies.extend(cookies)

    async def add_init_script(self, script):
        self.init_scripts.append(script)

    async def route(self, pattern, handler):
        self.routes.append((pattern, handler))


@pytest.fixture
def fake_sleep():
    return FakeSleep()


@pytest.fixture
def fake_context():
    return FakeContext()
