"""Core components for the AwwVision pipeline."""

from .exceptions import (
    AwwVisionError,
    ConfigurationError,
    FetchError,
    DownloadError,
    LabelError,
    UploadError,
    ListError,
)
from .interfaces import FeedClient, ObjectStore, LabelingService
from .models import FeedEntry, StoredObject, GalleryImage, RedditResponse
from .reddit_client import RedditFeedClient
from .storage_client import CloudStorageClient
from .vision_service import CloudVisionService
from .scrape_orchestrator import RedditScrapeOrchestrator

__all__ = [
    "AwwVisionError",
    "ConfigurationError",
    "FetchError",
    "DownloadError",
    "LabelError",
    "UploadError",
    "ListError",
    "FeedClient",
    "ObjectStore",
    "LabelingService",
    "FeedEntry",
    "StoredObject",
    "GalleryImage",
    "RedditResponse",
    "RedditFeedClient",
    "CloudStorageClient",
    "CloudVisionService",
    "RedditScrapeOrchestrator",
]
