import os


TIKTOK_BASE_URL = "https://www.tiktok.com"
TIKTOK_COOKIE_DOMAIN = ".tiktok.com"
ITEM_LIST_PATH = "/api/post/item_list"
CAPTCHA_URL_MARKER = "tiktok.com/_captcha"

COOKIES_FILE = os.environ.get("TIKTOK_COOKIES_PATH") or None
HEADLESS = os.environ.get("SCRAPER_HEADLESS", "true").lower() in ["1", "true", "yes"]
SLOW_MO_MS = int(os.environ.get("SCRAPER_SLOW_MO_MS", "0"))
BLOCK_MEDIA = os.environ.get("SCRAPER_BLOCK_MEDIA", "false").lower() in ["1", "true", "yes"]
NAV_TIMEOUT_MS = int(os.environ.get("SCRAPER_NAV_TIMEOUT_MS", "60000"))
SCREENSHOT_PATH = os.environ.get("SCRAPER_SCREENSHOT_PATH", "error.png")
USE_CDP = os.environ.get("SCRAPER_USE_CDP", "false").lower() in ["1", "true", "yes"]
CDP_URL = os.environ.get("SCRAPER_CDP_URL", "http://127.0.0.1:9222")
LOG_LEVEL = os.environ.get("SCRAPER_LOG_LEVEL", "INFO").upper()

DEFAULT_MAX_VIDEOS = 300
DEFAULT_DELAY_MIN_MS = 1000
DEFAULT_DELAY_MAX_MS = 4000
DEFAULT_VIEWPORT = (1920, 1080)

# The timezone id, the patched offset and the fingerprint locale must agree.
TIMEZONE_ID = "America/New_York"
TIMEZONE_OFFSET_MINUTES = 300
LOCALE = "en-US"


def launch_flags():
    """Return the static Chromium flags used for every launch.

    Window size and language are appended per run by the evasion profile,
    since they depend on the configured viewport and the fingerprint.
    """
    return [
        "--disable-blink-features=AutomationControlled",
        "--disable-infobars",
        "--disable-web-security",
        "--disable-extensions",
        "--disable-default-apps",
        "--disable-popup-blocking",
        "--disable-notifications",
        "--disable-translate",
        "--no-sandbox",
        "--mute-audio",
        "--disable-gpu",
    ]
