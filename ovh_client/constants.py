"""
Constants for the OVH API client library.
Header names and paths follow the OVH API authentication scheme.
"""

# HTTP Headers
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_APPLICATION = "X-Ovh-Application"
HEADER_TIMESTAMP = "X-Ovh-Timestamp"
HEADER_SIGNATURE = "X-Ovh-Signature"
HEADER_CONSUMER = "X-Ovh-Consumer"

CONTENT_TYPE_JSON = "application/json; charset=utf-8"

# Signature version prefix
SIGNATURE_PREFIX = "$1$"

# Unauthenticated endpoints used by the client itself
AUTH_TIME_PATH = "/auth/time"
AUTH_CREDENTIAL_PATH = "/auth/credential"

# Methods whose body takes part in the signature
BODY_METHODS = ("POST", "PUT")

DEFAULT_TIMEOUT = 30  # seconds

# Default configuration values
DEFAULT_CONFIG = {
    'timeout': DEFAULT_TIMEOUT,   # HTTP timeout in seconds
    'max_workers': 4,             # Threads running requests and callbacks
    'callback_dispatcher': None,  # Callable scheduling callbacks, e.g. loop.call_soon_threadsafe
}
