from typing import Union
from urllib.parse import quote, urlsplit

from .config import TIKTOK_BASE_URL
from .errors import InvalidUrlError


def update_cursor_in_url(url: str, cursor: Union[str, int]) -> str:
    """Return `url` with its `cursor` query parameter set to `str(cursor)`.

    The query string is edited as raw text rather than re-encoded, so the
    path, the other parameters (order and encoding) and the fragment stay
    byte-identical. An existing `cursor` is replaced in place and any later
    duplicates are dropped; a missing one is appended.
    """
    if not isinstance(url, str):
        raise InvalidUrlError(url, "expected a string")
    try:
        parts = urlsplit(url)
    except ValueError as e:
        raise InvalidUrlError(url, str(e)) from e
    if not parts.scheme or not parts.netloc:
        raise InvalidUrlError(url)

    base, hash_sign, fragment = url.partition("#")
    path, _, query = base.partition("?")
    value = "cursor=" + quote(str(cursor), safe="")

    params = []
    replaced = False
    for param in query.split("&") if query else []:
        if param.split("=", 1)[0] == "cursor":
            if not replaced:
                params.append(value)
                replaced = True
            continue
        params.append(param)
    if not replaced:
        params.append(value)

    return f"{path}?{'&'.join(params)}{hash_sign}{fragment}"


def profile_url(username: str) -> str:
    return f"{TIKTOK_BASE_URL}/@{username}"


def video_url(username: str, video_id: str) -> str:
    """Canonical detail-page URL for a video of `username`."""
    return f"{TIKTOK_BASE_URL}/@{username}/video/{video_id}?lang=en"
