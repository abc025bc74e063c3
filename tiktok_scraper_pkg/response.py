from typing import Any, Dict, Iterable, List
from .models import ScrapeConfig
from .urls import video_url


def dedupe_ids(ids: Iterable[str]) -> List[str]:
    """Collapse duplicate identifiers, keeping the first occurrence of each."""
    return list(dict.fromkeys(ids))


def build_video_urls(username: str, ids: Iterable[str]) -> List[str]:
    return [video_url(username, i) for i in ids]


def build_response(config: ScrapeConfig, ids: List[str]) -> Dict[str, Any]:
    """Compose the public result: unique ids plus their canonical URLs.

    `ids` is deduplicated again here so the output never depends on the
    caller having done it.
    """
    unique = dedupe_ids(ids)
    return {
        "username": config.username,
        "found": len(unique) > 0,
        "total_videos": len(unique),
        "video_ids": unique,
        "video_urls": build_video_urls(config.username, unique),
    }


def build_error(config: ScrapeConfig, error: str) -> Dict[str, Any]:
    """Build a consistent error response; partial results are not included."""
    return {
        "username": config.username,
        "found": False,
        "error": error,
        "video_ids": "error",
    }
