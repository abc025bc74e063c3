from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .config import (
    BLOCK_MEDIA,
    CDP_URL,
    COOKIES_FILE,
    DEFAULT_DELAY_MAX_MS,
    DEFAULT_DELAY_MIN_MS,
    DEFAULT_MAX_VIDEOS,
    DEFAULT_VIEWPORT,
    HEADLESS,
    NAV_TIMEOUT_MS,
    SCREENSHOT_PATH,
    USE_CDP,
)


class DelayRange(BaseModel):
    """Bounds in milliseconds for the randomized pause between API pages."""
    model_config = ConfigDict(frozen=True)

    min_ms: int = Field(DEFAULT_DELAY_MIN_MS, ge=0)
    max_ms: int = Field(DEFAULT_DELAY_MAX_MS, ge=0)

    @model_validator(mode="after")
    def check_order(self):
        if self.min_ms > self.max_ms:
            raise ValueError("delay_range.min_ms must not exceed delay_range.max_ms")
        return self


class Viewport(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: int = Field(DEFAULT_VIEWPORT[0], gt=0)
    height: int = Field(DEFAULT_VIEWPORT[1], gt=0)

    def as_dict(self) -> dict:
        return {"width": self.width, "height": self.height}


class ScrapeConfig(BaseModel):
    """Settings for one scrape run, shared by the CLI and the HTTP API.

    The model is frozen: nothing may change the configuration once the
    browser session has been opened with it.
    """
    model_config = ConfigDict(frozen=True)

    username: str
    max_videos: int = Field(DEFAULT_MAX_VIDEOS, ge=1)
    delay_range: DelayRange = Field(default_factory=DelayRange)
    viewport: Viewport = Field(default_factory=Viewport)
    headless: bool = HEADLESS
    proxy: Optional[str] = None
    nav_timeout_ms: int = Field(NAV_TIMEOUT_MS, gt=0)
    screenshot_path: str = SCREENSHOT_PATH
    cookies_file: Optional[str] = COOKIES_FILE
    block_media: bool = BLOCK_MEDIA
    use_cdp: bool = USE_CDP
    cdp_url: str = CDP_URL

    @field_validator("username")
    @classmethod
    def normalize_username(cls, v: str) -> str:
        v = v.strip().lstrip("@")
        if not v or "/" in v or any(c.isspace() for c in v):
            raise ValueError("username must be a bare TikTok handle")
        return v


def _to_str(v):
    # The API emits cursors and ids as JSON numbers on some endpoints.
    if isinstance(v, int) and not isinstance(v, bool):
        return str(v)
    return v


class ApiItem(BaseModel):
    id: str

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return _to_str(v)


class ApiPage(BaseModel):
    """One page of the item list API.

    Only the fields the pagination loop needs are modelled; the rest of the
    payload is ignored.
    """
    model_config = ConfigDict(populate_by_name=True)

    cursor: str = "0"
    has_more: bool = Field(False, alias="hasMore")
    items: List[ApiItem] = Field(default_factory=list, alias="itemList")

    @field_validator("cursor", mode="before")
    @classmethod
    def coerce_cursor(cls, v):
        return "0" if v is None else _to_str(v)

    @field_validator("items", mode="before")
    @classmethod
    def null_items(cls, v):
        return [] if v is None else v

    @property
    def ids(self) -> List[str]:
        return [item.id for item in self.items]
