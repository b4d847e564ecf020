"""Clients for the external pronoun lookup services.

Both return ``None`` for "no data" (unknown user, no pronoun set) and raise a
ScraperError subclass for transport failures or malformed responses.
"""

from typing import Optional
from urllib.parse import quote

from loguru import logger

from marathon_pronouns.config.settings import settings
from .base_scraper import BaseScraper, MalformedResponseError


class SpeedrunComClient(BaseScraper):
    """speedrun.com user API; profiles may carry a free-text pronoun field."""

    name = "speedrun.com"

    def __init__(self, *args, base_url: Optional[str] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.base_url = (base_url or settings.speedruncom_users_url).rstrip("/")

    async def fetch_pronouns(self, handle: str) -> Optional[str]:
        body = await self._get_json(f"{self.base_url}/{quote(handle, safe='')}")
        if body is None:
            return None
        if not isinstance(body, dict):
            raise MalformedResponseError("speedrun.com user response is not an object")

        data = body.get("data")
        if data is None:
            return None
        if not isinstance(data, dict):
            raise MalformedResponseError("speedrun.com 'data' field is not an object")

        pronouns = data.get("pronouns")
        if pronouns is not None and not isinstance(pronouns, str):
            raise MalformedResponseError("speedrun.com 'pronouns' field is not a string")
        logger.debug(f"speedrun.com pronouns for {handle}: {pronouns!r}")
        return pronouns or None


class AlejoPronounsClient(BaseScraper):
    """pronouns.alejo.io (Twitch pronoun extension) user API."""

    name = "pronouns.alejo.io"

    def __init__(self, *args, base_url: Optional[str] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.base_url = (base_url or settings.alejo_pronouns_users_url).rstrip("/")

    async def fetch_pronoun_id(self, handle: str) -> Optional[str]:
        """Returns the first entry's pronoun code, or None for an empty result."""
        body = await self._get_json(f"{self.base_url}/{quote(handle, safe='')}")
        if body is None:
            return None
        if not isinstance(body, list):
            raise MalformedResponseError("pronouns.alejo.io response is not a list")
        if not body:
            return None

        first = body[0]
        if not isinstance(first, dict):
            raise MalformedResponseError("pronouns.alejo.io entry is not an object")
        pronoun_id = first.get("pronoun_id")
        logger.debug(f"pronouns.alejo.io code for {handle}: {pronoun_id!r}")
        return str(pronoun_id) if pronoun_id is not None else ""
