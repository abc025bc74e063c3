"""Access to TikTok's item list API from inside the browser page.

The first page is captured from the profile page's own request; later pages
are fetched with `fetch()` evaluated in the page so they carry the session's
cookies and signed query parameters.
"""
import json
import logging
from typing import Optional, Tuple, Union

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, Response
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from pydantic import ValidationError

from .config import ITEM_LIST_PATH
from .errors import ApiFetchError, NavigationTimeout
from .models import ApiPage
from .urls import profile_url

logger = logging.getLogger(__name__)

FETCH_SCRIPT = """
async (apiUrl) => {
  const res = await fetch(apiUrl, { credentials: 'include' });
  const body = await res.text();
  return { ok: res.ok, status: res.status, body };
}
"""


def is_item_list_response(response: Response) -> bool:
    return ITEM_LIST_PATH in response.url and response.status == 200


def parse_api_page(payload: Union[str, bytes, dict], url: Optional[str] = None) -> ApiPage:
    """Parse an item list payload, raising ApiFetchError when it is malformed."""
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError as e:
            raise ApiFetchError(f"Malformed JSON from item list API: {e}", url=url) from e
    if not isinstance(payload, dict):
        raise ApiFetchError(
            f"Unexpected item list payload type: {type(payload).__name__}", url=url
        )
    try:
        return ApiPage.model_validate(payload)
    except ValidationError as e:
        raise ApiFetchError(f"Unexpected item list payload: {e}", url=url) from e


async def capture_first_page(page: Page, username: str, timeout_ms: int) -> Tuple[str, ApiPage]:
    """Open the profile and capture the first item list response.

    Returns the response URL, which later serves as the template for cursor
    substitution, together with the parsed page.
    """
    url = profile_url(username)
    logger.info("Opening %s", url)
    try:
        async with page.expect_response(is_item_list_response, timeout=timeout_ms) as response_info:
            await page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
        response = await response_info.value
    except PlaywrightTimeoutError as e:
        raise NavigationTimeout(url, timeout_ms) from e

    try:
        body = await response.text()
    except PlaywrightError as e:
        raise ApiFetchError(f"Could not read item list response: {e}", url=response.url) from e
    return response.url, parse_api_page(body, url=response.url)


async def fetch_api_page(page: Page, url: str) -> ApiPage:
    """Fetch one item list page from inside the page context."""
    try:
        result = await page.evaluate(FETCH_SCRIPT, url)
    except PlaywrightError as e:
        raise ApiFetchError(f"Failed to fetch: {e}", url=url) from e

    status = result.get("status")
    if not result.get("ok"):
        raise ApiFetchError(f"Failed to fetch: {status}", status=status, url=url)
    return parse_api_page(result.get("body", ""), url=url)
