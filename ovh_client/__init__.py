"""
OVH API Client Library

A Python client library that signs requests to the OVH API (and its
Kimsufi, So you Start and RunAbove variants) and runs the consumer key
credential handshake.

Example usage:
    from ovh_client import OVHClient, Endpoint

    client = OVHClient(Endpoint.OVH_EU, "app-key", "app-secret", "consumer-key")
    response = client.get("/me").result()
"""

from .client import OVHClient, APIResponse, compute_signature
from .access_rules import AccessRule, Method, all_rights, read_only_rights
from .credentials import (
    Credentials,
    CredentialsResult,
    load_credentials,
    credentials_from_env
)
from .endpoints import Endpoint
from .exceptions import (
    OVHAPIError,
    ConfigurationError,
    MissingApplicationKeyError,
    MissingApplicationSecretError,
    MissingConsumerKeyError,
    InvalidResponseError,
    HTTPError,
    RequestError
)
from .constants import (
    HEADER_APPLICATION,
    HEADER_TIMESTAMP,
    HEADER_SIGNATURE,
    HEADER_CONSUMER,
    DEFAULT_CONFIG,
    DEFAULT_TIMEOUT
)

__version__ = "1.0.0"
__all__ = [
    "OVHClient",
    "APIResponse",
    "compute_signature",
    "AccessRule",
    "Method",
    "all_rights",
    "read_only_rights",
    "Credentials",
    "CredentialsResult",
    "load_credentials",
    "credentials_from_env",
    "Endpoint",
    "OVHAPIError",
    "ConfigurationError",
    "MissingApplicationKeyError",
    "MissingApplicationSecretError",
    "MissingConsumerKeyError",
    "InvalidResponseError",
    "HTTPError",
    "RequestError",
    "HEADER_APPLICATION",
    "HEADER_TIMESTAMP",
    "HEADER_SIGNATURE",
    "HEADER_CONSUMER",
    "DEFAULT_CONFIG",
    "DEFAULT_TIMEOUT"
]
