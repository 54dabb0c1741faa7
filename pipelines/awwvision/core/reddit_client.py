"""
Reddit feed client for the AwwVision pipeline.

Fetches the hot listing of a subreddit and turns it into feed entries.
"""

import logging
from typing import List, Optional

import httpx
from pydantic import ValidationError

from .exceptions import FetchError
from .interfaces import FeedClient
from .models import FeedEntry, RedditResponse, feed_entries_from_listing

logger = logging.getLogger(__name__)

DEFAULT_FEED_URL = "https://www.reddit.com/r/aww/hot.json"


class RedditFeedClient(FeedClient):
    """
    Reddit JSON listing client.

    Reddit rejects requests without a descriptive User-Agent, so one is
    always sent.
    """

    def __init__(
        self,
        user_agent: str,
        feed_url: str = DEFAULT_FEED_URL,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize Reddit feed client.

        Args:
            user_agent: Value of the User-Agent header sent to Reddit
            feed_url: Listing endpoint (e.g. https://www.reddit.com/r/aww/hot.json)
            timeout: Request timeout in seconds
            http_client: Pre-configured client, mainly for tests
        """
        self.user_agent = user_agent
        self.feed_url = feed_url
        self.timeout = timeout
        self._client = http_client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout,
                follow_redirects=True
            )
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def fetch_listing(self) -> RedditResponse:
        """
        Fetch and decode the listing document.

        Raises:
            FetchError: On transport errors, non-2xx responses or a body that
                        does not match the listing shape.
        """
        client = await self._get_client()
        try:
            response = await client.get(
                self.feed_url,
                headers={"User-Agent": self.user_agent}
            )
            response.raise_for_status()
            listing = RedditResponse.model_validate(response.json())
        except httpx.HTTPError as e:
            raise FetchError(f"Could not fetch {self.feed_url}: {e}") from e
        except (ValueError, ValidationError) as e:
            raise FetchError(f"Could not decode listing from {self.feed_url}: {e}") from e

        logger.info(f"Fetched {len(listing.listings())} listings from {self.feed_url}")
        return listing

    async def fetch(self) -> List[FeedEntry]:
        """Fetch the listing and return the entries that carry a preview image."""
        listing = await self.fetch_listing()
        entries = feed_entries_from_listing(listing)
        logger.info(f"{len(entries)} feed entries with preview images")
        return entries
