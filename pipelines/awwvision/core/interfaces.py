"""
Capability interfaces the scrape orchestrator is written against.

Concrete Google Cloud implementations live in reddit_client, storage_client
and vision_service; tests substitute in-memory fakes.
"""

from abc import ABC, abstractmethod
from typing import BinaryIO, Dict, List, Optional

from .models import FeedEntry, StoredObject


class FeedClient(ABC):
    """Source of feed entries for a scrape run."""

    @abstractmethod
    async def fetch(self) -> List[FeedEntry]:
        """
        Fetch the current feed.

        Returns:
            Entries eligible for processing, in feed order.

        Raises:
            FetchError: If the feed is unreachable or undecodable.
        """
        pass

    async def close(self):
        """Release any connections held by the client."""
        return None


class ObjectStore(ABC):
    """Bucket-like store keyed by object name."""

    @abstractmethod
    def exists(self, name: str) -> bool:
        """Return True if an object with this name is stored. Never raises."""
        pass

    @abstractmethod
    def upload(
        self,
        name: str,
        content: BinaryIO,
        content_type: str,
        metadata: Dict[str, str]
    ) -> None:
        """
        Write a new publicly readable object.

        Raises:
            UploadError: On transport or permission failure.
        """
        pass

    @abstractmethod
    def list_all(self) -> List[StoredObject]:
        """
        List every stored object, following page tokens to the end.

        Raises:
            ListError: If any page cannot be retrieved.
        """
        pass


class LabelingService(ABC):
    """Image classifier returning one best-effort label."""

    @abstractmethod
    def label_image(self, image_bytes: bytes) -> Optional[str]:
        """
        Label an image.

        Returns:
            The top-ranked label, or None if the image could not be labeled.

        Raises:
            LabelError: If the service reports an explicit error.
        """
        pass
