#!/usr/bin/env python3
"""
TikTok Profile Video Scraper - CLI Standalone Version

Collects the video ids of a public TikTok profile by opening the profile in a
fingerprinted Chromium session and paginating the item list API.

Usage:
    python scraper.py <USERNAME> [OPTIONS]

Example:
    python scraper.py pubity --max-videos 100
    python scraper.py @pubity --use-cdp --cdp-url http://localhost:9222
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from tiktok_scraper_pkg.api import capture_first_page, fetch_api_page
from tiktok_scraper_pkg.browser import BrowserSession
from tiktok_scraper_pkg.config import (
    BLOCK_MEDIA,
    CDP_URL,
    COOKIES_FILE,
    DEFAULT_DELAY_MAX_MS,
    DEFAULT_DELAY_MIN_MS,
    DEFAULT_MAX_VIDEOS,
    DEFAULT_VIEWPORT,
    HEADLESS,
    LOG_LEVEL,
    NAV_TIMEOUT_MS,
    SCREENSHOT_PATH,
)
from tiktok_scraper_pkg.errors import ScraperError
from tiktok_scraper_pkg.models import DelayRange, ScrapeConfig, Viewport
from tiktok_scraper_pkg.pagination import VideoPaginator
from tiktok_scraper_pkg.response import build_error, build_response
from tiktok_scraper_pkg.scraper_logging import save_error_screenshot, setup_logging

logger = logging.getLogger(__name__)


async def scrape_tiktok(config: ScrapeConfig) -> dict:
    """
    Scrape the video ids of the configured TikTok user.

    Args:
        config: ScrapeConfig with the username and run settings

    Returns:
        Dictionary with unique video ids and their canonical URLs

    Raises:
        ScraperError: on navigation timeout, API failure or a bad template URL.
            A screenshot of the page is attempted before the error propagates.
    """
    logger.info("🚀 Starting scrape for @%s", config.username)

    async with BrowserSession(config) as session:
        page = session.page

        async def fetch(url: str):
            return await fetch_api_page(page, url)

        try:
            first_url, first_page = await capture_first_page(
                page, config.username, config.nav_timeout_ms
            )
            logger.info("✅ TikTok loaded successfully")
            paginator = VideoPaginator(config.max_videos, config.delay_range, fetch)
            video_ids = await paginator.run(first_url, first_page)
        except Exception as e:
            logger.error("❌ Error during scraping: %s", e)
            await save_error_screenshot(page, config.screenshot_path)
            raise

    logger.info("✅ Scraping completed: %d unique videos found", len(video_ids))
    return build_response(config, video_ids)


def _bool_arg(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="TikTok Profile Video Scraper - Collect video ids from a public profile",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s pubity
  %(prog)s pubity --max-videos 50 --delay-min 2000 --delay-max 5000
  %(prog)s pubity --headless false --screenshot /tmp/tiktok_error.png
  %(prog)s pubity --use-cdp --cdp-url http://localhost:9222
        """
    )

    parser.add_argument(
        "username",
        help="TikTok username, with or without the leading @"
    )
    parser.add_argument(
        "--max-videos",
        type=int,
        default=DEFAULT_MAX_VIDEOS,
        help=f"Stop once this many unique videos are collected (default: {DEFAULT_MAX_VIDEOS})"
    )
    parser.add_argument(
        "--delay-min",
        type=int,
        default=DEFAULT_DELAY_MIN_MS,
        help=f"Minimum pause between API pages in milliseconds (default: {DEFAULT_DELAY_MIN_MS})"
    )
    parser.add_argument(
        "--delay-max",
        type=int,
        default=DEFAULT_DELAY_MAX_MS,
        help=f"Maximum pause between API pages in milliseconds (default: {DEFAULT_DELAY_MAX_MS})"
    )
    parser.add_argument("--width", type=int, default=DEFAULT_VIEWPORT[0], help="Viewport width")
    parser.add_argument("--height", type=int, default=DEFAULT_VIEWPORT[1], help="Viewport height")
    parser.add_argument(
        "--headless",
        type=_bool_arg,
        default=HEADLESS,
        help="Run browser in headless mode (default: SCRAPER_HEADLESS or true)"
    )
    parser.add_argument(
        "--proxy",
        help="Proxy URL to use for requests (e.g., http://proxy.example.com:8080)"
    )
    parser.add_argument(
        "--nav-timeout",
        type=int,
        default=NAV_TIMEOUT_MS,
        help=f"Timeout in milliseconds for the initial profile load (default: {NAV_TIMEOUT_MS})"
    )
    parser.add_argument(
        "--screenshot",
        default=SCREENSHOT_PATH,
        help=f"Where to save the diagnostic screenshot on failure (default: {SCREENSHOT_PATH})"
    )
    parser.add_argument(
        "--cookies",
        default=COOKIES_FILE,
        help="Path to an exported cookies.json to merge into the session"
    )
    parser.add_argument(
        "--block-media",
        action="store_true",
        default=BLOCK_MEDIA,
        help="Abort image, media and font requests"
    )
    parser.add_argument(
        "--use-cdp",
        action="store_true",
        help="Attach to a running Chrome via the Chrome DevTools Protocol"
    )
    parser.add_argument(
        "--cdp-url",
        default=CDP_URL,
        help=f"CDP endpoint URL (default: {CDP_URL})"
    )
    parser.add_argument(
        "--output",
        "-o",
        help="Output file path (JSON format). If not specified, prints to stdout"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging"
    )
    return parser


def config_from_args(args: argparse.Namespace) -> ScrapeConfig:
    return ScrapeConfig(
        username=args.username,
        max_videos=args.max_videos,
        delay_range=DelayRange(min_ms=args.delay_min, max_ms=args.delay_max),
        viewport=Viewport(width=args.width, height=args.height),
        headless=args.headless,
        proxy=args.proxy,
        nav_timeout_ms=args.nav_timeout,
        screenshot_path=args.screenshot,
        cookies_file=args.cookies,
        block_media=args.block_media,
        use_cdp=args.use_cdp,
        cdp_url=args.cdp_url,
    )


def _emit(result: dict, output: Optional[str]) -> None:
    if output:
        with open(output, "w", encoding="utf-8") as f:
            json.dump(result, f, indent=2)
        logger.info("📁 Results saved to: %s", output)
    else:
        print(json.dumps(result, indent=2))


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point. Returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging("DEBUG" if args.verbose else LOG_LEVEL)

    try:
        config = config_from_args(args)
    except ValidationError as e:
        parser.error(str(e))

    try:
        result = asyncio.run(scrape_tiktok(config))
    except KeyboardInterrupt:
        logger.warning("⚠️ Interrupted by user")
        return 130
    except ScraperError as e:
        _emit(build_error(config, str(e)), args.output)
        return 1
    except Exception as e:
        logger.exception("❌ Fatal error")
        _emit(build_error(config, str(e)), args.output)
        return 1

    _emit(result, args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
