"""
AwwVision Service - Pydantic Models
Response schemas for the gallery and scrape endpoints
"""

from typing import Optional, Dict, Any, List
from pydantic import BaseModel, Field


class GalleryImageResponse(BaseModel):
    """A stored image as shown in the gallery."""
    url: str = Field(..., description="Public URL of the stored object")
    label: Optional[str] = Field(None, description="Label assigned by the Vision API")


class GalleryResponse(BaseModel):
    """Gallery listing, optionally restricted to one label."""
    images: List[GalleryImageResponse] = Field(default_factory=list)
    label: Optional[str] = Field(None, description="Label filter, if any")
    labels: List[str] = Field(
        default_factory=list,
        description="Distinct labels present in the listing, first-seen order"
    )
    count: int = 0

    model_config = {
        "json_schema_extra": {
            "example": {
                "images": [
                    {"url": "http://storage.googleapis.com/aww-bucket/abc123.jpg", "label": "dog"}
                ],
                "label": "dog",
                "labels": ["dog"],
                "count": 1
            }
        }
    }


class ScrapeStatusResponse(BaseModel):
    """Response for the scrape trigger endpoint."""
    status: str
    message: str
    stats: Optional[Dict[str, Any]] = None
