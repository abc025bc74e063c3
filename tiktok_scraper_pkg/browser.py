import logging
from typing import Optional

import httpx
from browserforge.injectors.playwright import AsyncNewContext
from playwright.async_api import Browser, BrowserContext, Page, Playwright
from playwright.async_api import async_playwright

from .config import SLOW_MO_MS
from .cookies_auth import apply_cookies
from .evasion import EvasionProfile, build_evasion_profile
from .models import ScrapeConfig
from .navigation import RequestFilter

logger = logging.getLogger(__name__)


async def launch_browser(pw: Playwright, profile: EvasionProfile, config: ScrapeConfig) -> Browser:
    """Launch Chromium with the evasion profile's flags.

    Headless and proxy are configurable per run.
    """
    return await pw.chromium.launch(
        headless=config.headless,
        proxy={"server": config.proxy} if config.proxy else None,
        slow_mo=SLOW_MO_MS if SLOW_MO_MS > 0 else None,
        args=profile.launch_args,
    )


async def resolve_cdp_endpoint(cdp_url: str) -> str:
    """Resolve an http CDP address to its browser WebSocket URL.

    Chrome rejects non-IP Host headers on the DevTools socket, so asking
    `/json/version` first gives a URL that works from containers too. Falls
    back to the given address when the lookup fails.
    """
    if cdp_url.startswith("ws"):
        return cdp_url
    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(cdp_url.rstrip("/") + "/json/version", timeout=10.0)
            response.raise_for_status()
            ws_url = response.json().get("webSocketDebuggerUrl", "")
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("Failed to fetch WebSocket URL from %s: %s, trying direct connect", cdp_url, e)
        return cdp_url
    return ws_url or cdp_url


async def connect_over_cdp(pw: Playwright, cdp_url: str) -> Browser:
    """Attach to an already running Chrome started with `--remote-debugging-port`."""
    endpoint = await resolve_cdp_endpoint(cdp_url)
    return await pw.chromium.connect_over_cdp(endpoint)


async def new_context(browser: Browser, profile: EvasionProfile) -> BrowserContext:
    """Create a context carrying the generated fingerprint.

    browserforge derives the user agent, headers and screen from the
    fingerprint and injects its navigator overrides; locale and timezone are
    pinned so they agree with the timezone patch.
    """
    return await AsyncNewContext(
        browser,
        fingerprint=profile.fingerprint,
        locale=profile.locale,
        timezone_id=profile.timezone_id,
    )


async def apply_stealth(context: BrowserContext, profile: EvasionProfile) -> None:
    """Install every evasion patch as an init script, before any page exists."""
    for patch in profile.patches:
        await context.add_init_script(patch.script)
    logger.debug("Installed %d stealth patches", len(profile.patches))


class BrowserSession:
    """Explicit-lifecycle owner of the Playwright runtime, browser, context and page.

    Usage:
        async with BrowserSession(config) as session:
            await session.page.goto(...)

    Setup mutates the context (cookies, routes, init scripts); afterwards it
    is only read. Teardown runs on every exit path.
    """

    def __init__(self, config: ScrapeConfig, profile: Optional[EvasionProfile] = None):
        self.config = config
        self.profile = profile
        self.request_filter = RequestFilter(block_media=config.block_media)
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None

    async def __aenter__(self) -> "BrowserSession":
        try:
            await self.start()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def start(self) -> None:
        if self.profile is None:
            self.profile = build_evasion_profile(self.config)

        self.playwright = await async_playwright().start()
        if self.config.use_cdp:
            logger.info("Connecting via CDP: %s", self.config.cdp_url)
            self.browser = await connect_over_cdp(self.playwright, self.config.cdp_url)
        else:
            self.browser = await launch_browser(self.playwright, self.profile, self.config)

        self.context = await new_context(self.browser, self.profile)
        await apply_stealth(self.context, self.profile)
        count = await apply_cookies(self.context, self.config.cookies_file)
        logger.debug("Applied %d cookies", count)
        await self.request_filter.install(self.context)

        self.page = await self.context.new_page()
        await self.page.set_viewport_size(self.config.viewport.as_dict())

    async def close(self) -> None:
        # Close the tab and context always; close the browser only when we launched it.
        for resource in (self.page, self.context):
            if resource is None:
                continue
            try:
                await resource.close()
            except Exception as e:
                logger.debug("Ignoring close error: %s", e)
        if self.browser is not None and not self.config.use_cdp:
            try:
                await self.browser.close()
            except Exception as e:
                logger.debug("Ignoring browser close error: %s", e)
        if self.playwright is not None:
            try:
                await self.playwright.stop()
            except Exception as e:
                logger.debug("Ignoring playwright stop error: %s", e)
        logger.debug(
            "Session closed (blocked=%d allowed=%d)",
            self.request_filter.blocked,
            self.request_filter.allowed,
        )
        self.page = self.context = self.browser = self.playwright = None
