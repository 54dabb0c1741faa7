"""
Google Cloud Storage client for the AwwVision pipeline.

Stores labeled images as publicly readable objects and lists them back for
the gallery.
"""

import logging
from typing import Any, BinaryIO, Dict, List, Optional

from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload

from .exceptions import ListError, UploadError
from .google_api import build_service
from .interfaces import ObjectStore
from .models import StoredObject

logger = logging.getLogger(__name__)

PUBLIC_URL_TEMPLATE = "http://storage.googleapis.com/{bucket}/{name}"


def get_public_url(bucket_name: str, object_name: str) -> str:
    """Public URL of an object in a bucket with public-read ACLs."""
    return PUBLIC_URL_TEMPLATE.format(bucket=bucket_name, name=object_name)


class CloudStorageClient(ObjectStore):
    """
    Cloud Storage JSON API client bound to a single bucket.

    Objects are written with the publicRead predefined ACL so the gallery can
    link to them directly.
    """

    # Setting an ACL on insert needs full control
    SCOPES = ['https://www.googleapis.com/auth/devstorage.full_control']

    def __init__(
        self,
        bucket_name: str,
        service_account_json: Optional[str] = None,
        application_name: Optional[str] = None,
        service: Any = None
    ):
        """
        Initialize Cloud Storage client.

        Args:
            bucket_name: Bucket holding the labeled images
            service_account_json: JSON string of service account credentials.
                                  If None, uses Application Default Credentials.
            application_name: User-Agent prefix for API requests
            service: Pre-built storage v1 service resource (skips authentication)
        """
        self.bucket_name = bucket_name
        self.service = service
        if self.service is None:
            self.service = build_service(
                'storage', 'v1', self.SCOPES,
                service_account_json=service_account_json,
                application_name=application_name
            )
            logger.info(f"Cloud Storage client ready for bucket {self.bucket_name}")

    def public_url(self, name: str) -> str:
        return get_public_url(self.bucket_name, name)

    def exists(self, name: str) -> bool:
        """
        Check whether an object is already stored.

        Any failure, including transport errors, is reported as "absent".
        """
        try:
            self.service.objects().get(bucket=self.bucket_name, object=name).execute()
            return True
        except HttpError as e:
            if e.resp.status != 404:
                logger.warning(f"Lookup of {name} failed, treating as absent: {e}")
            return False
        except Exception as e:
            logger.warning(f"Lookup of {name} failed, treating as absent: {e}")
            return False

    def upload(
        self,
        name: str,
        content: BinaryIO,
        content_type: str = "image/jpeg",
        metadata: Optional[Dict[str, str]] = None
    ) -> None:
        """
        Upload an object with custom metadata and a public-read ACL.

        Args:
            name: Object name
            content: Readable binary stream with the object bytes
            content_type: MIME type of the content
            metadata: Custom string metadata (e.g. {"label": "dog"})

        Raises:
            UploadError: If the insert request fails
        """
        body = {
            "name": name,
            "contentType": content_type,
            "metadata": dict(metadata or {})
        }
        media = MediaIoBaseUpload(content, mimetype=content_type)

        try:
            self.service.objects().insert(
                bucket=self.bucket_name,
                body=body,
                media_body=media,
                predefinedAcl="publicRead"
            ).execute()
        except Exception as e:
            raise UploadError(name, str(e)) from e

        logger.info(f"Uploaded {name} to gs://{self.bucket_name}")

    def list_all(self) -> List[StoredObject]:
        """
        List all objects in the bucket.

        Follows nextPageToken until the last page. A page without items and
        without a token ends the listing.

        Raises:
            ListError: If any page request fails
        """
        objects: List[StoredObject] = []
        page_token = None

        while True:
            try:
                results = self.service.objects().list(
                    bucket=self.bucket_name,
                    pageToken=page_token
                ).execute()
            except Exception as e:
                logger.error(f"Storage API error listing bucket {self.bucket_name}: {e}")
                raise ListError(f"Could not list bucket {self.bucket_name}: {e}") from e

            results = results or {}
            for item in results.get('items') or []:
                objects.append(self._to_stored_object(item))

            page_token = results.get('nextPageToken')
            if not page_token:
                break

        logger.info(f"Listed {len(objects)} objects in bucket {self.bucket_name}")
        return objects

    def _to_stored_object(self, item: Dict[str, Any]) -> StoredObject:
        name = item["name"]
        metadata = item.get("metadata") or {}
        return StoredObject(
            name=name,
            label=metadata.get("label"),
            public_url=self.public_url(name)
        )
