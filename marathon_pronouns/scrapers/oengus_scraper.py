import asyncio
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from loguru import logger

from marathon_pronouns.config.settings import settings
from marathon_pronouns.models.enums import Source
from .base_scraper import EventScraper, MalformedResponseError


class OengusScraper(EventScraper):
    """Adapter for marathons hosted on Oengus."""

    name = "Oengus"
    source = Source.OENGUS

    def __init__(self, *args, base_url: Optional[str] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.base_url = (base_url or settings.oengus_api_url).rstrip("/")

    async def fetch_event(self, locator: str) -> Optional[Dict[str, Any]]:
        """Fetch marathon info, submissions and schedule for a marathon slug."""
        marathon_url = f"{self.base_url}/marathons/{quote(locator, safe='')}"
        logger.info(f"Fetching Oengus marathon with slug {locator}")

        marathon = await self._get_json(marathon_url)
        if marathon is None:
            return {"marathon": None}

        submissions, schedule = await asyncio.gather(
            self._get_json(f"{marathon_url}/submissions"),
            self._get_json(f"{marathon_url}/schedule"),
        )
        logger.debug(
            f"Fetched Oengus marathon {locator}: "
            f"{len(submissions or [])} submissions, schedule present: {schedule is not None}"
        )
        return {"marathon": marathon, "submissions": submissions, "schedule": schedule}

    async def list_marathons(
        self, start: str, end: str, zone_id: str
    ) -> List[Dict[str, Any]]:
        """List marathons running between two ISO-8601 instants."""
        marathons = await self._get_json(
            f"{self.base_url}/marathons/forDates",
            params={"start": start, "end": end, "zoneId": zone_id},
        )
        if marathons is None:
            return []
        if not isinstance(marathons, list):
            raise MalformedResponseError("Oengus marathon listing is not a list")
        return marathons
