"""
Data models for the AwwVision pipeline.

The Reddit models mirror the subset of the listing JSON the pipeline reads;
any other field in the document is ignored.
"""

import html
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


# =============================================================================
# Reddit listing document
# =============================================================================

class RedditSource(BaseModel):
    """Full-size source of a preview image."""
    url: Optional[str] = None


class RedditImage(BaseModel):
    """One preview image of a post."""
    id: Optional[str] = None
    source: Optional[RedditSource] = None


class RedditPreview(BaseModel):
    """Preview block; present only on posts Reddit could render an image for."""
    images: Optional[List[RedditImage]] = None


class RedditListingData(BaseModel):
    """Payload of a single post."""
    url: Optional[str] = None
    preview: Optional[RedditPreview] = None


class RedditListing(BaseModel):
    """A child of the listing (kind t3)."""
    data: Optional[RedditListingData] = None


class RedditData(BaseModel):
    children: Optional[List[RedditListing]] = None


class RedditResponse(BaseModel):
    """Top-level listing document returned by /r/<sub>/hot.json."""
    data: Optional[RedditData] = None

    def listings(self) -> List[RedditListing]:
        if self.data is None:
            return []
        return self.data.children or []


# =============================================================================
# Pipeline values
# =============================================================================

class FeedEntry(BaseModel):
    """An image from the feed, named by its Reddit image id."""
    model_config = ConfigDict(frozen=True)

    source_image_url: str
    display_name: str
    preview_available: bool = True


class StoredObject(BaseModel):
    """An object in the image bucket."""
    model_config = ConfigDict(frozen=True)

    name: str
    label: Optional[str] = None
    public_url: str


class GalleryImage(BaseModel):
    """An image as rendered by the gallery."""
    model_config = ConfigDict(frozen=True)

    url: str
    label: Optional[str] = None


def feed_entries_from_listing(response: RedditResponse) -> List[FeedEntry]:
    """
    Build feed entries from a decoded listing.

    Posts without a preview produce nothing. Every preview image with an id
    and a source URL becomes one entry named "<id>.jpg". Reddit HTML-escapes
    preview URLs, so they are unescaped here.
    """
    entries = []
    for listing in response.listings():
        post = listing.data
        if post is None or post.preview is None:
            continue
        for image in post.preview.images or []:
            if not image.id or image.source is None or not image.source.url:
                continue
            entries.append(FeedEntry(
                source_image_url=html.unescape(image.source.url),
                display_name=f"{image.id}.jpg",
                preview_available=True
            ))
    return entries
