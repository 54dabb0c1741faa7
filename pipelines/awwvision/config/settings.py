"""
Configuration settings for the AwwVision pipeline.

Values are resolved once at startup from, in order of precedence:
environment variables, the Cloud Foundry service binding in VCAP_SERVICES,
Google Secret Manager, and the bundled awwvision.yaml defaults.
"""

import base64
import binascii
import json
import os
import yaml
import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import Dict, Optional, Any

from ..core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULTS_PATH = Path(__file__).parent / "awwvision.yaml"

# Service binding key written by the GCP service broker for storage buckets
STORAGE_BINDING_KEY = "google-storage"

# Secret Manager cache to avoid repeated API calls
_secrets_cache: Dict[str, str] = {}


def get_secret(secret_name: str, project_id: Optional[str] = None) -> Optional[str]:
    """
    Fetch a secret from Google Secret Manager.

    Args:
        secret_name: Name of the secret (e.g., 'awwvision-service-account')
        project_id: GCP project ID. If None, uses GCP_PROJECT_ID env var.

    Returns:
        Secret value as string, or None if not found.
    """
    if secret_name in _secrets_cache:
        return _secrets_cache[secret_name]

    project = project_id or os.getenv('GCP_PROJECT_ID')
    if not project:
        logger.warning(f"GCP_PROJECT_ID not set, cannot fetch secret '{secret_name}'")
        return None

    try:
        from google.cloud import secretmanager

        client = secretmanager.SecretManagerServiceClient()
        name = f"projects/{project}/secrets/{secret_name}/versions/latest"

        response = client.access_secret_version(request={"name": name})
        secret_value = response.payload.data.decode("UTF-8")

        _secrets_cache[secret_name] = secret_value
        logger.info(f"Loaded secret '{secret_name}' from Secret Manager")
        return secret_value

    except Exception as e:
        logger.warning(f"Could not fetch secret '{secret_name}' from Secret Manager: {e}")
        return None


@dataclass
class ServiceBinding:
    """Bucket and credentials from a bound google-storage service instance."""
    bucket_name: Optional[str] = None
    service_account_json: Optional[str] = None


@dataclass
class RedditConfig:
    """Reddit feed configuration."""
    feed_url: str = "https://www.reddit.com/r/aww/hot.json"
    user_agent: str = "awwvision/1.0"


@dataclass
class StorageConfig:
    """Cloud Storage configuration."""
    bucket_name: Optional[str] = None
    service_account_json: Optional[str] = None


@dataclass
class VisionConfig:
    """Cloud Vision API configuration."""
    service_account_json: Optional[str] = None
    max_results: int = 1


@dataclass
class PipelineConfig:
    """Main pipeline configuration."""
    application_name: str = "awwvision"
    gcp_project_id: Optional[str] = None
    http_timeout: float = 30.0
    reddit: RedditConfig = field(default_factory=RedditConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    vision: VisionConfig = field(default_factory=VisionConfig)

    def require_bucket_name(self) -> str:
        """Bucket name, or ConfigurationError when none was configured."""
        if not self.storage.bucket_name:
            raise ConfigurationError(
                "No storage bucket configured. Bind a google-storage service "
                "(VCAP_SERVICES) or set AWWVISION_BUCKET_NAME."
            )
        return self.storage.bucket_name


def parse_vcap_services(vcap_json: Optional[str]) -> Optional[ServiceBinding]:
    """
    Extract the storage binding from a VCAP_SERVICES document.

    Reads google-storage[0].credentials: bucket_name, and PrivateKeyData which
    holds the base64-encoded service account JSON.

    Args:
        vcap_json: Raw VCAP_SERVICES value

    Returns:
        ServiceBinding, or None if the document has no google-storage binding.
    """
    if not vcap_json:
        return None

    try:
        services = json.loads(vcap_json)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"VCAP_SERVICES is not valid JSON: {e}") from e

    bindings = services.get(STORAGE_BINDING_KEY) or []
    if not bindings:
        logger.warning(f"VCAP_SERVICES has no '{STORAGE_BINDING_KEY}' binding")
        return None

    credentials = bindings[0].get("credentials") or {}
    binding = ServiceBinding(bucket_name=credentials.get("bucket_name"))

    private_key_data = credentials.get("PrivateKeyData")
    if private_key_data:
        try:
            binding.service_account_json = base64.b64decode(private_key_data).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise ConfigurationError(f"PrivateKeyData is not base64-encoded JSON: {e}") from e

    return binding


def load_defaults(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load default settings from YAML.

    Args:
        config_path: Path to a settings file. If None, uses awwvision.yaml
                     next to this module.
    """
    path = Path(config_path) if config_path else DEFAULTS_PATH
    if not path.exists():
        logger.warning(f"Settings file not found: {path}")
        return {}

    with open(path, 'r') as f:
        return yaml.safe_load(f) or {}


def _load_service_account_json(binding: Optional[ServiceBinding], project_id: Optional[str]) -> Optional[str]:
    """Resolve service account JSON; None means Application Default Credentials."""
    # Option 1: Direct JSON string in env var
    if os.getenv('GOOGLE_SERVICE_ACCOUNT_JSON'):
        return os.getenv('GOOGLE_SERVICE_ACCOUNT_JSON')

    # Option 2: Path to JSON file
    sa_file_path = os.getenv('GOOGLE_SERVICE_ACCOUNT_FILE')
    if sa_file_path:
        if Path(sa_file_path).exists():
            logger.info(f"Loaded service account from file: {sa_file_path}")
            return Path(sa_file_path).read_text()
        logger.warning(f"Service account file not found: {sa_file_path}")

    # Option 3: Service binding
    if binding and binding.service_account_json:
        return binding.service_account_json

    # Option 4: Secret Manager
    secret_name = os.getenv('AWWVISION_SERVICE_ACCOUNT_SECRET')
    if secret_name:
        return get_secret(secret_name, project_id)

    return None


def get_pipeline_config(config_path: Optional[str] = None) -> PipelineConfig:
    """
    Create pipeline configuration from the environment.

    Environment variables:
        AWWVISION_BUCKET_NAME: Bucket override (otherwise from VCAP_SERVICES)
        VCAP_SERVICES: Cloud Foundry service bindings
        REDDIT_FEED_URL: Listing endpoint
        REDDIT_USER_AGENT: User-Agent sent to Reddit
        GCP_APPLICATION_NAME: Application name reported to Google APIs
        GCP_PROJECT_ID: Project for Secret Manager lookups
        GOOGLE_SERVICE_ACCOUNT_JSON / GOOGLE_SERVICE_ACCOUNT_FILE: Credentials
        AWWVISION_SERVICE_ACCOUNT_SECRET: Secret holding the credentials
        AWWVISION_HTTP_TIMEOUT: Feed and download timeout in seconds
    """
    defaults = load_defaults(config_path)
    reddit_defaults = defaults.get('reddit') or {}
    vision_defaults = defaults.get('vision') or {}

    project_id = os.getenv('GCP_PROJECT_ID') or defaults.get('gcp_project_id')
    binding = parse_vcap_services(os.getenv('VCAP_SERVICES'))
    service_account_json = _load_service_account_json(binding, project_id)

    bucket_name = (
        os.getenv('AWWVISION_BUCKET_NAME') or
        (binding.bucket_name if binding else None) or
        defaults.get('bucket_name')
    )

    reddit_config = RedditConfig(
        feed_url=os.getenv('REDDIT_FEED_URL', reddit_defaults.get('feed_url', RedditConfig.feed_url)),
        user_agent=os.getenv('REDDIT_USER_AGENT', reddit_defaults.get('user_agent', RedditConfig.user_agent))
    )

    storage_config = StorageConfig(
        bucket_name=bucket_name,
        service_account_json=service_account_json
    )

    vision_config = VisionConfig(
        service_account_json=service_account_json,
        max_results=int(vision_defaults.get('max_results', VisionConfig.max_results))
    )

    return PipelineConfig(
        application_name=os.getenv('GCP_APPLICATION_NAME', defaults.get('application_name', 'awwvision')),
        gcp_project_id=project_id,
        http_timeout=float(os.getenv('AWWVISION_HTTP_TIMEOUT', defaults.get('http_timeout', 30.0))),
        reddit=reddit_config,
        storage=storage_config,
        vision=vision_config
    )
