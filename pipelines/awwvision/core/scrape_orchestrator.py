"""
Scrape Orchestrator for the AwwVision pipeline.

Coordinates the feed, labeling and storage components for one scrape run.
"""

import asyncio
import io
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

import httpx

from .exceptions import DownloadError, LabelError, UploadError
from .interfaces import FeedClient, LabelingService, ObjectStore
from .models import FeedEntry, RedditResponse, feed_entries_from_listing

logger = logging.getLogger(__name__)

JPEG_CONTENT_TYPE = "image/jpeg"
LABEL_METADATA_KEY = "label"

# Terminal outcome of a single feed entry
SKIPPED_NO_PREVIEW = "skipped_no_preview"
DOWNLOAD_FAILED = "download_failed"
ALREADY_STORED = "already_stored"
LABEL_FAILED = "label_failed"
NO_LABEL = "no_label"
STORED = "stored"
UPLOAD_FAILED = "upload_failed"

OUTCOMES = (
    SKIPPED_NO_PREVIEW,
    DOWNLOAD_FAILED,
    ALREADY_STORED,
    LABEL_FAILED,
    NO_LABEL,
    STORED,
    UPLOAD_FAILED,
)


class RedditScrapeOrchestrator:
    """
    Main orchestration logic for the scrape-label-store pipeline.

    Workflow, one entry at a time:
    1. Skip entries without preview data
    2. Download image bytes
    3. Skip names already in the bucket
    4. Label the image (Cloud Vision)
    5. Upload labeled images with {"label": <label>} metadata

    Only a feed fetch failure aborts a run. Every other failure is logged
    and leaves nothing written, so the entry is retried on the next run.
    """

    def __init__(
        self,
        feed_client: FeedClient,
        object_store: ObjectStore,
        labeling_service: LabelingService,
        http_client: Optional[httpx.AsyncClient] = None,
        download_timeout: float = 30.0
    ):
        """
        Initialize scrape orchestrator.

        Args:
            feed_client: Source of feed entries
            object_store: Bucket the labeled images are written to
            labeling_service: Image labeler
            http_client: Client used for image downloads, mainly for tests
            download_timeout: Download timeout in seconds
        """
        self.feed = feed_client
        self.store = object_store
        self.vision = labeling_service
        self.download_timeout = download_timeout
        self._http_client = http_client

        logger.info("RedditScrapeOrchestrator initialized")

    async def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                timeout=self.download_timeout,
                follow_redirects=True
            )
        return self._http_client

    async def close(self):
        """Close the download client and the feed client."""
        await self.feed.close()
        if self._http_client and not self._http_client.is_closed:
            await self._http_client.aclose()
            self._http_client = None

    async def download(self, url: str) -> bytes:
        """
        Download an image.

        Raises:
            DownloadError: On transport errors or non-2xx responses
        """
        client = await self._get_http_client()
        try:
            response = await client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise DownloadError(url, str(e)) from e
        return response.content

    async def scrape(self) -> Dict[str, Any]:
        """
        Fetch the feed and process every entry.

        Raises:
            FetchError: If the feed cannot be fetched; nothing is processed
        """
        entries = await self.feed.fetch()
        return await self.run(entries)

    async def run_listing(self, response: RedditResponse) -> Dict[str, Any]:
        """Process an already decoded Reddit listing."""
        return await self.run(feed_entries_from_listing(response))

    async def run(self, entries: Iterable[FeedEntry]) -> Dict[str, Any]:
        """
        Process feed entries sequentially.

        Args:
            entries: Feed entries, processed in order

        Returns:
            Run statistics: a counter per outcome plus discovered/status/errors
        """
        stats: Dict[str, Any] = {
            "started_at": datetime.now(timezone.utc).isoformat(),
            "discovered": 0,
            "errors": [],
        }
        for outcome in OUTCOMES:
            stats[outcome] = 0

        for entry in entries:
            stats["discovered"] += 1
            outcome = await self.process_entry(entry, stats["errors"])
            stats[outcome] += 1

        stats["completed_at"] = datetime.now(timezone.utc).isoformat()
        stats["status"] = "success" if not stats["errors"] else "partial"

        logger.info(
            f"Scrape complete: {stats['discovered']} entries, "
            f"{stats[STORED]} stored, {stats[ALREADY_STORED]} already stored, "
            f"{len(stats['errors'])} errors"
        )
        return stats

    async def process_entry(self, entry: FeedEntry, errors: Optional[list] = None) -> str:
        """
        Run one entry through download, existence check, labeling and upload.

        Returns:
            The entry's terminal outcome
        """
        errors = errors if errors is not None else []
        url = getattr(entry, "source_image_url", None)
        name = getattr(entry, "display_name", None)

        if not getattr(entry, "preview_available", False) or not url or not name:
            logger.debug(f"Skipping entry without preview data: {url}")
            return SKIPPED_NO_PREVIEW

        try:
            raw = await self.download(url)
        except DownloadError as e:
            logger.warning(f"Issue in streaming image {url}: {e}")
            errors.append(str(e))
            return DOWNLOAD_FAILED

        # Storage and Vision clients block; run them in the executor one at a time
        loop = asyncio.get_event_loop()

        # Only label and upload images not already in storage
        if await loop.run_in_executor(None, self.store.exists, name):
            logger.debug(f"Already stored: {name}")
            return ALREADY_STORED

        try:
            label = await loop.run_in_executor(None, self.vision.label_image, raw)
        except LabelError as e:
            logger.error(f"Issue with labeling image {url}: {e}")
            errors.append(f"Labeling failed for {url}: {e}")
            return LABEL_FAILED

        if not label:
            logger.info(f"No label for image {url}, not storing")
            return NO_LABEL

        try:
            await loop.run_in_executor(
                None,
                lambda: self.store.upload(
                    name,
                    io.BytesIO(raw),
                    JPEG_CONTENT_TYPE,
                    {LABEL_METADATA_KEY: label}
                )
            )
        except UploadError as e:
            logger.error(f"Issue with uploading image {url}: {e}")
            errors.append(str(e))
            return UPLOAD_FAILED

        logger.info(f"Stored {name} with label '{label}'")
        return STORED


def create_orchestrator_from_env() -> RedditScrapeOrchestrator:
    """
    Create an orchestrator instance using environment configuration.

    Returns:
        Configured RedditScrapeOrchestrator
    """
    from ..config.settings import get_pipeline_config
    from .reddit_client import RedditFeedClient
    from .storage_client import CloudStorageClient
    from .vision_service import CloudVisionService

    config = get_pipeline_config()

    feed_client = RedditFeedClient(
        user_agent=config.reddit.user_agent,
        feed_url=config.reddit.feed_url,
        timeout=config.http_timeout
    )

    storage_client = CloudStorageClient(
        bucket_name=config.require_bucket_name(),
        service_account_json=config.storage.service_account_json,
        application_name=config.application_name
    )

    vision_service = CloudVisionService(
        service_account_json=config.vision.service_account_json,
        max_results=config.vision.max_results,
        application_name=config.application_name
    )

    return RedditScrapeOrchestrator(
        feed_client=feed_client,
        object_store=storage_client,
        labeling_service=vision_service,
        download_timeout=config.http_timeout
    )
