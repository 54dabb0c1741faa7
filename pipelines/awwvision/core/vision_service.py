"""
Cloud Vision Service for the AwwVision pipeline.

Labels images with the Vision API LABEL_DETECTION feature.
"""

import base64
import logging
from typing import Any, Dict, Optional

from .exceptions import LabelError
from .google_api import build_service
from .interfaces import LabelingService

logger = logging.getLogger(__name__)


class CloudVisionService(LabelingService):
    """
    Image labeling service using the Cloud Vision API.

    Requests a single label per image and returns its description.
    """

    SCOPES = ['https://www.googleapis.com/auth/cloud-vision']

    def __init__(
        self,
        service_account_json: Optional[str] = None,
        max_results: int = 1,
        application_name: Optional[str] = None,
        service: Any = None
    ):
        """
        Initialize Cloud Vision service.

        Args:
            service_account_json: JSON string of service account credentials.
                                  If None, uses Application Default Credentials.
            max_results: Number of labels requested per image
            application_name: User-Agent prefix for API requests
            service: Pre-built vision v1 service resource (skips authentication)
        """
        self.max_results = max_results
        self.service = service
        if self.service is None:
            self.service = build_service(
                'vision', 'v1', self.SCOPES,
                service_account_json=service_account_json,
                application_name=application_name
            )

    def build_request(self, image_bytes: bytes) -> Dict[str, Any]:
        """Build the annotate request body for one image."""
        return {
            "requests": [{
                "image": {"content": base64.b64encode(image_bytes).decode("ascii")},
                "features": [{"type": "LABEL_DETECTION", "maxResults": self.max_results}]
            }]
        }

    def label_image(self, image_bytes: bytes) -> Optional[str]:
        """
        Get a single label for an image.

        Args:
            image_bytes: Raw image file bytes

        Returns:
            Description of the top-ranked label, or None if the response
            carries neither labels nor an error

        Raises:
            LabelError: If the request fails or the response carries an error
        """
        try:
            batch_response = self.service.images().annotate(
                body=self.build_request(image_bytes)
            ).execute()
        except Exception as e:
            raise LabelError(f"Vision API request failed: {e}") from e

        return self._parse_response(batch_response)

    def _parse_response(self, batch_response: Optional[Dict[str, Any]]) -> Optional[str]:
        if not batch_response or not batch_response.get("responses"):
            logger.debug("Vision API returned no responses")
            return None

        response = batch_response["responses"][0] or {}
        annotations = response.get("labelAnnotations")

        if annotations is None:
            error = response.get("error")
            if error:
                raise LabelError(error.get("message") or "Unknown error getting image annotations")
            # Neither labels nor an error: nothing confident to report
            return None

        if not annotations:
            return None

        return annotations[0].get("description")
