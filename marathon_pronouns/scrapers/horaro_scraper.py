from typing import Any, Dict, Optional
from urllib.parse import quote

from loguru import logger

from marathon_pronouns.config.settings import settings
from marathon_pronouns.models.enums import Source
from .base_scraper import EventScraper, ScraperError


class HoraroScraper(EventScraper):
    """Adapter for schedules published on Horaro."""

    name = "Horaro"
    source = Source.HORARO

    def __init__(self, *args, base_url: Optional[str] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.base_url = (base_url or settings.horaro_url).rstrip("/")

    async def fetch_event(self, locator: str) -> Optional[Dict[str, Any]]:
        """Fetch the schedule JSON for an ``organization/event`` locator."""
        organization, _, event = locator.strip("/").partition("/")
        if not organization or not event:
            raise ScraperError(
                f"Horaro locator must look like 'organization/event', got {locator!r}"
            )

        url = f"{self.base_url}/{quote(organization, safe='')}/{quote(event, safe='')}.json"
        logger.info(f"Fetching Horaro schedule {organization}/{event}")
        return await self._get_json(url)
