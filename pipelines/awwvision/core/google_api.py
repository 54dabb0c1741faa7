"""
Authenticated Google API discovery clients.

Credentials come from a service account JSON string when one is configured,
otherwise from Application Default Credentials.
"""

import json
import logging
from typing import Any, List, Optional, Union

import google.auth
import google_auth_httplib2
import httplib2
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.http import set_user_agent

logger = logging.getLogger(__name__)


def load_credentials(scopes: List[str], service_account_json: Union[str, dict, None] = None):
    """
    Load scoped credentials.

    Args:
        scopes: OAuth scopes requested for the credentials
        service_account_json: JSON string (or parsed dict) of service account
                              credentials. If None, uses Application Default Credentials.
    """
    if service_account_json:
        if isinstance(service_account_json, str):
            creds_dict = json.loads(service_account_json)
        else:
            creds_dict = service_account_json

        return service_account.Credentials.from_service_account_info(creds_dict, scopes=scopes)

    creds, _ = google.auth.default(scopes=scopes)
    return creds


def build_service(
    api_name: str,
    api_version: str,
    scopes: List[str],
    service_account_json: Union[str, dict, None] = None,
    application_name: Optional[str] = None
) -> Any:
    """
    Build a discovery service resource for a Google API.

    Args:
        api_name: API name, e.g. 'storage' or 'vision'
        api_version: API version, e.g. 'v1'
        scopes: OAuth scopes
        service_account_json: Service account credentials, or None for ADC
        application_name: Sent as the User-Agent prefix on every request
    """
    try:
        creds = load_credentials(scopes, service_account_json)

        http = google_auth_httplib2.AuthorizedHttp(creds, http=httplib2.Http())
        if application_name:
            http = set_user_agent(http, application_name)

        service = build(api_name, api_version, http=http, cache_discovery=False)
        logger.info(f"{api_name} {api_version} client authenticated")
        return service

    except Exception as e:
        logger.error(f"Failed to authenticate {api_name} client: {e}")
        raise
