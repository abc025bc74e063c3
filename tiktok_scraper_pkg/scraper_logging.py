import logging
from typing import Optional

from .config import LOG_LEVEL

logger = logging.getLogger(__name__)


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Configure root logging to stderr.

    Stdout is reserved for the JSON result, so nothing here may write to it.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        force=True,
    )


async def save_error_screenshot(page, path: str) -> Optional[str]:
    """Save a full-page screenshot for diagnostics after a fatal error.

    Best effort: returns the path on success and None when there is no page
    or the screenshot itself fails, so the original error is never masked.
    """
    if page is None:
        return None
    try:
        await page.screenshot(path=path, full_page=True)
    except Exception as e:
        logger.error("Failed to take screenshot: %s", e)
        return None
    logger.info("Screenshot saved to %s", path)
    return path
