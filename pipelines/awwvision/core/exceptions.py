"""
Exceptions raised by the AwwVision pipeline components.
"""


class AwwVisionError(Exception):
    """Base exception for the AwwVision pipeline."""


class ConfigurationError(AwwVisionError):
    """Required configuration (bucket, credentials) could not be resolved."""


class FetchError(AwwVisionError):
    """The Reddit feed could not be fetched or decoded. Aborts a scrape run."""


class DownloadError(AwwVisionError):
    """An image could not be downloaded from its source URL."""

    def __init__(self, url: str, message: str):
        self.url = url
        super().__init__(f"Failed to download {url}: {message}")


class LabelError(AwwVisionError):
    """The Vision API returned an error for an annotation request."""


class UploadError(AwwVisionError):
    """An object could not be written to Cloud Storage."""

    def __init__(self, name: str, message: str):
        self.name = name
        super().__init__(f"Failed to upload {name}: {message}")


class ListError(AwwVisionError):
    """The bucket listing could not be retrieved."""
