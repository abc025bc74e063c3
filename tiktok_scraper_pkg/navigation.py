import asyncio
import logging
import random
from playwright.async_api import BrowserContext, Route

from .config import CAPTCHA_URL_MARKER
from .models import DelayRange

logger = logging.getLogger(__name__)

MEDIA_RESOURCE_TYPES = {"image", "media", "font"}


def draw_delay_ms(delay_range: DelayRange) -> float:
    """Draw a pause uniformly from the configured bounds."""
    return random.uniform(delay_range.min_ms, delay_range.max_ms)


async def random_delay(delay_range: DelayRange) -> float:
    """Sleep for a random duration between API pages to emulate human pacing.

    Returns the slept duration in milliseconds so callers can log it.
    """
    delay_ms = draw_delay_ms(delay_range)
    await asyncio.sleep(delay_ms / 1000.0)
    return delay_ms


class RequestFilter:
    """Route handler that aborts captcha loads and, optionally, heavy media.

    Counts are kept so the session can log what was blocked on exit.
    """

    def __init__(self, block_media: bool = False):
        self.block_media = block_media
        self.blocked = 0
        self.allowed = 0

    def should_block(self, url: str, resource_type: str) -> bool:
        if CAPTCHA_URL_MARKER in url:
            return True
        return self.block_media and resource_type in MEDIA_RESOURCE_TYPES

    async def handle(self, route: Route) -> None:
        request = route.request
        if self.should_block(request.url, request.resource_type):
            self.blocked += 1
            await route.abort()
            return
        self.allowed += 1
        await route.continue_()

    async def install(self, context: BrowserContext) -> None:
        await context.route("**/*", self.handle)
        logger.debug("Request filter installed (block_media=%s)", self.block_media)
