import json
import logging
import os
import random
import re
import string
import time
from typing import List, Optional
from playwright.async_api import BrowserContext
from .config import TIKTOK_COOKIE_DOMAIN

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase
COOKIE_TTL_SECONDS = 86400


def _base36_token(length: int) -> str:
    return "".join(random.choice(_BASE36) for _ in range(length))


def session_cookies(now: Optional[float] = None) -> List[dict]:
    """Build the synthetic web-id and CSRF cookies a fresh visitor would carry.

    Both expire one day from `now` and are scoped to the whole TikTok domain.
    """
    expires = int(now if now is not None else time.time()) + COOKIE_TTL_SECONDS
    common = {
        "domain": TIKTOK_COOKIE_DOMAIN,
        "path": "/",
        "expires": expires,
        "httpOnly": True,
        "secure": True,
    }
    return [
        {"name": "tt_webid", "value": "7" + _base36_token(17), **common},
        {"name": "tt_csrf_token", "value": _base36_token(8), **common},
    ]


def load_cookies(path: Optional[str]) -> List[dict]:
    """Load and sanitize an exported cookies JSON for TikTok domains only.

    - Removes whitespace from values
    - Normalizes domain to start with a dot
    - Normalizes `sameSite` values
    - Filters out entries missing name/value
    """
    if not path or not os.path.exists(path):
        return []
    try:
        with open(path, "r", encoding="utf-8") as f:
            cookies = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Could not read cookies file %s: %s", path, e)
        return []
    if not isinstance(cookies, list):
        logger.warning("Cookies file %s does not hold a list", path)
        return []

    clean: List[dict] = []
    for c in cookies:
        if not isinstance(c, dict):
            continue
        c = dict(c)
        if "value" in c and isinstance(c["value"], str):
            c["value"] = re.sub(r"\s+", "", c["value"])
        domain = c.get("domain", "")
        if domain and not domain.startswith("."):
            domain = "." + domain
        if "tiktok.com" not in domain:
            continue
        c["domain"] = domain

        if "sameSite" in c:
            ss = str(c["sameSite"]).lower()
            if ss in ["no_restriction", "none"]:
                c["sameSite"] = "None"
            elif ss in ["lax", "strict"]:
                c["sameSite"] = ss.capitalize()
            else:
                c["sameSite"] = "Lax"

        if "expirationDate" in c and "expires" not in c:
            c["expires"] = int(c["expirationDate"])
        for k in ["hostOnly", "session", "storeId", "id", "expirationDate"]:
            c.pop(k, None)

        if not c.get("name") or not c.get("value"):
            continue

        clean.append(c)
    return clean


def merge_cookies(base: List[dict], extra: List[dict]) -> List[dict]:
    """Overlay `extra` on `base`, keyed by (name, domain, path)."""
    merged = {}
    for c in list(base) + list(extra):
        merged[(c.get("name"), c.get("domain"), c.get("path", "/"))] = c
    return list(merged.values())


async def apply_cookies(context: BrowserContext, cookies_file: Optional[str] = None) -> int:
    """Add the session cookies (plus any from `cookies_file`) to the context.

    Returns the number of cookies applied.
    """
    imported = load_cookies(cookies_file)
    if imported:
        logger.info("Loaded %d cookies from %s", len(imported), cookies_file)
    cookies = merge_cookies(session_cookies(), imported)
    await context.add_cookies(cookies)
    return len(cookies)
