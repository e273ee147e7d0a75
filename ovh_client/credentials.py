"""
Credential values and loaders.

Applications keep their application key/secret (and, once validated, the
consumer key) outside of the code: in a property-list file with the keys
``ApplicationKey``, ``ApplicationSecret`` and ``ConsumerKey``, or in the
``OVH_*`` environment variables.
"""

import logging
import os
import plistlib
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import requests

logger = logging.getLogger(__name__)

PLIST_APPLICATION_KEY = "ApplicationKey"
PLIST_APPLICATION_SECRET = "ApplicationSecret"
PLIST_CONSUMER_KEY = "ConsumerKey"

ENV_APPLICATION_KEY = "OVH_APPLICATION_KEY"
ENV_APPLICATION_SECRET = "OVH_APPLICATION_SECRET"
ENV_CONSUMER_KEY = "OVH_CONSUMER_KEY"


@dataclass(frozen=True)
class Credentials:
    """Keys identifying an application and, optionally, an end user."""

    application_key: str
    application_secret: str
    consumer_key: Optional[str] = None


@dataclass
class CredentialsResult:
    """
    Outcome of a credential request.

    On success the client already holds ``consumer_key``; the user still has
    to visit ``validation_url`` before the key authorizes any call.
    ``previous_consumer_key`` is the key the client held before the request,
    restored by ``OVHClient.abandon_credentials()``.
    """

    consumer_key: Optional[str] = None
    validation_url: Optional[str] = None
    error: Optional[Exception] = None
    request: Optional[requests.PreparedRequest] = None
    response: Optional[requests.Response] = None
    previous_consumer_key: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self):
        """Raise the delivered error, if any."""
        if self.error is not None:
            raise self.error


def _from_mapping(values: Mapping[str, Any], key_name: str, secret_name: str,
                  consumer_name: str) -> Credentials:
    return Credentials(
        application_key=values.get(key_name) or "",
        application_secret=values.get(secret_name) or "",
        consumer_key=values.get(consumer_name) or None,
    )


def load_credentials(path: str) -> Credentials:
    """
    Load credentials from a property-list file.

    Missing application key or secret entries load as empty strings; the
    client reports them when a call is made.

    Args:
        path: Path of the .plist file

    Returns:
        Credentials read from the file
    """
    with open(path, 'rb') as fp:
        values = plistlib.load(fp)

    logger.debug("Loaded credentials from %s", path)
    return _from_mapping(values, PLIST_APPLICATION_KEY, PLIST_APPLICATION_SECRET, PLIST_CONSUMER_KEY)


def credentials_from_env(environ: Optional[Mapping[str, str]] = None) -> Credentials:
    """Read credentials from the OVH_* environment variables."""
    if environ is None:
        environ = os.environ
    return _from_mapping(environ, ENV_APPLICATION_KEY, ENV_APPLICATION_SECRET, ENV_CONSUMER_KEY)
