import logging

from fastapi import FastAPI

from scraper import scrape_tiktok
from tiktok_scraper_pkg.errors import ScraperError
from tiktok_scraper_pkg.models import ScrapeConfig
from tiktok_scraper_pkg.response import build_error
from tiktok_scraper_pkg.scraper_logging import setup_logging

logger = logging.getLogger(__name__)

app = FastAPI(title="TikTok Profile Video Scraper")


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/scrape/tiktok")
async def scrape_tiktok_endpoint(data: ScrapeConfig):
    """Run one scrape and return the result dict.

    Scraper failures are reported in the body with `found: false` rather than
    as HTTP errors, so callers only have to handle one response shape.
    """
    try:
        return await scrape_tiktok(data)
    except ScraperError as e:
        return build_error(data, str(e))
    except Exception as e:
        logger.exception("❌ Fatal error scraping @%s", data.username)
        return build_error(data, str(e))


if __name__ == "__main__":
    import uvicorn

    setup_logging()
    uvicorn.run(app, host="0.0.0.0", port=8000)
