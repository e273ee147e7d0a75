"""
OVH API client.

This module signs requests the way the OVH API expects them: every
authenticated call carries a SHA-1 signature computed from the application
secret, the consumer key, the request and a timestamp synchronised with the
API server clock.
"""

import hashlib
import json
import logging
import math
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional, Tuple, Union

import requests

from .access_rules import AccessRule
from .constants import (
    HEADER_CONTENT_TYPE,
    HEADER_APPLICATION,
    HEADER_TIMESTAMP,
    HEADER_SIGNATURE,
    HEADER_CONSUMER,
    CONTENT_TYPE_JSON,
    SIGNATURE_PREFIX,
    AUTH_TIME_PATH,
    AUTH_CREDENTIAL_PATH,
    BODY_METHODS,
    DEFAULT_CONFIG
)
from .credentials import Credentials, CredentialsResult
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

logger = logging.getLogger(__name__)


def compute_signature(application_secret: str, consumer_key: str, method: str,
                      url: str, body: str, timestamp: int) -> str:
    """
    Compute the signature of a request.

    Format: "$1$" + SHA1_HEX(secret + "+" + consumer_key + "+" + METHOD + "+" +
    url + "+" + body + "+" + timestamp)

    Args:
        application_secret: Secret of the application
        consumer_key: Consumer key the request is made with
        method: HTTP method
        url: Full request URL, query string included
        body: JSON body as sent on the wire, empty string if none
        timestamp: Server-synchronised Unix timestamp

    Returns:
        Signature header value
    """
    payload = "+".join([application_secret, consumer_key, method.upper(), url, body, str(timestamp)])
    return SIGNATURE_PREFIX + hashlib.sha1(payload.encode('utf-8')).hexdigest()


@dataclass
class APIResponse:
    """Outcome of an API call, as delivered to its callback."""

    result: Any = None
    error: Optional[Exception] = None
    request: Optional[requests.PreparedRequest] = None
    response: Optional[requests.Response] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self):
        """Raise the delivered error, if any."""
        if self.error is not None:
            raise self.error


ResultCallback = Callable[[Any, Optional[Exception], Optional[requests.PreparedRequest],
                           Optional[requests.Response]], None]
CredentialsCallback = Callable[[Optional[str], Optional[str], Optional[Exception]], None]


class OVHClient:
    """
    Client for the OVH API.

    Calls run on a thread pool and return a ``concurrent.futures.Future``;
    an optional callback receives ``(result, error, request, response)``.
    Errors are delivered, never raised, so local mistakes (a missing key)
    and server rejections reach the caller the same way.
    """

    def __init__(self, endpoint: Union[Endpoint, str], application_key: str,
                 application_secret: str, consumer_key: Optional[str] = None,
                 endpoint_version: Optional[str] = None, **config):
        """
        Initialize OVH API client.

        Args:
            endpoint: API to call, an Endpoint or its short name ("ovh-eu")
            application_key: Key of the application
            application_secret: Secret of the application
            consumer_key: Validated consumer key, if already known
            endpoint_version: API version, the latest one by default
            **config: Configuration options (timeout, max_workers, callback_dispatcher)
        """
        if isinstance(endpoint, str):
            endpoint = Endpoint.from_name(endpoint)

        self.endpoint = endpoint.base_url(endpoint_version)
        self._application_key = application_key or ""
        self._application_secret = application_secret or ""
        self.consumer_key = consumer_key

        # Merge default config with user overrides
        self.config = {**DEFAULT_CONFIG, **config}
        self._validate_config()

        self._delta_time: Optional[float] = None
        self._delta_lock = threading.Lock()

        self.session = requests.Session()
        self.executor = ThreadPoolExecutor(
            max_workers=self.config['max_workers'],
            thread_name_prefix='ovh-client'
        )

        logger.info("API initialized with endpoint %s", self.endpoint)

    @classmethod
    def from_credentials(cls, endpoint: Union[Endpoint, str], credentials: Credentials,
                         **kwargs) -> "OVHClient":
        """Create a client from a Credentials value."""
        return cls(
            endpoint,
            credentials.application_key,
            credentials.application_secret,
            consumer_key=credentials.consumer_key,
            **kwargs
        )

    @property
    def application_key(self) -> str:
        return self._application_key

    @property
    def application_secret(self) -> str:
        return self._application_secret

    @property
    def delta_time(self) -> Optional[float]:
        """Offset between the server clock and the local clock, once known."""
        return self._delta_time

    def _validate_config(self):
        """Validate client configuration."""
        if self.config['timeout'] is None or self.config['timeout'] <= 0:
            raise ConfigurationError("timeout must be positive")

        if self.config['max_workers'] <= 0:
            raise ConfigurationError("max_workers must be positive")

        dispatcher = self.config['callback_dispatcher']
        if dispatcher is not None and not callable(dispatcher):
            raise ConfigurationError("callback_dispatcher must be callable")

    # Clock synchronisation

    def calculate_delta_time(self) -> float:
        """
        Fetch the server time and cache its offset from the local clock.

        Returns:
            The new delta, in seconds

        Raises:
            InvalidResponseError: If the body is not a Unix timestamp
            requests.RequestException: If the request fails
        """
        logger.debug("calculating delta time...")
        prepared = self.session.prepare_request(
            requests.Request('GET', f"{self.endpoint}{AUTH_TIME_PATH}")
        )
        response = self.session.send(prepared, timeout=self.config['timeout'])

        try:
            server_time = float(response.text.strip())
        except ValueError:
            server_time = math.nan
        if not math.isfinite(server_time):
            raise InvalidResponseError(f"unexpected server time {response.text[:64]!r}")

        self._delta_time = server_time - time.time()
        logger.debug("calculate delta time done, got %.3f", self._delta_time)
        return self._delta_time

    def _ensure_delta_time(self) -> float:
        """Return the cached delta, computing it once if needed."""
        if self._delta_time is not None:
            return self._delta_time

        # Concurrent first calls wait for a single /auth/time round trip
        with self._delta_lock:
            if self._delta_time is None:
                self.calculate_delta_time()
            return self._delta_time

    # Request pipeline

    def _check_preconditions(self, consumer_key: Optional[str], authenticated: bool) -> Optional[OVHAPIError]:
        """Check the keys a request needs, before any network I/O."""
        if not self._application_key:
            return MissingApplicationKeyError()
        if not self._application_secret:
            return MissingApplicationSecretError()
        if authenticated and not consumer_key:
            return MissingConsumerKeyError()
        return None

    def _prepare_request_body(self, content=None) -> bytes:
        """Serialize request body; these exact bytes are sent and signed."""
        if content is None:
            return b''
        return json.dumps(content, separators=(',', ':')).encode('utf-8')

    def _sign_headers(self, consumer_key: str, method: str, url: str, body: bytes) -> Dict[str, str]:
        """Build the authentication headers of a request."""
        timestamp = int(time.time() + self._delta_time)
        signed_body = body.decode('utf-8') if method in BODY_METHODS else ""
        signature = compute_signature(
            self._application_secret,
            consumer_key,
            method,
            url,
            signed_body,
            timestamp
        )
        return {
            HEADER_TIMESTAMP: str(timestamp),
            HEADER_SIGNATURE: signature,
            HEADER_CONSUMER: consumer_key
        }

    def _interpret_response(self, response: requests.Response) -> Tuple[Any, Optional[OVHAPIError]]:
        """Decode the body and map error statuses."""
        if not response.content:
            result = None
        else:
            try:
                result = response.json()
            except ValueError:
                result = response.text

        error = None
        if response.status_code >= 400:
            error = HTTPError(response.status_code)
            if isinstance(result, dict) and isinstance(result.get('message'), str):
                error = RequestError(
                    response.status_code,
                    http_code=result.get('httpCode'),
                    error_code=result.get('errorCode'),
                    message=result['message']
                )
        return result, error

    def _raw_call(self, method: str, path: str, content=None, authenticated: bool = True) -> APIResponse:
        """
        Sign and send a request, then interpret its response.

        Args:
            method: HTTP method
            path: Path relative to the endpoint, query string included
            content: JSON-serializable body
            authenticated: Whether the request is signed

        Returns:
            APIResponse carrying either a result or an error
        """
        log_prefix = f"[{method} {path}]"
        # The key may change on another worker; sign and send the one checked
        consumer_key = self.consumer_key

        error = self._check_preconditions(consumer_key, authenticated)
        if error is not None:
            logger.warning("%s %s", log_prefix, error)
            return APIResponse(error=error)

        if authenticated:
            try:
                self._ensure_delta_time()
            except (OVHAPIError, requests.RequestException) as e:
                logger.warning("%s error while calculating delta time: %s", log_prefix, e)
                return APIResponse(error=e)

        try:
            body = self._prepare_request_body(content)
        except (TypeError, ValueError) as e:
            logger.warning("%s error while serializing JSON: %s", log_prefix, e)
            return APIResponse(error=e)

        headers = {
            HEADER_CONTENT_TYPE: CONTENT_TYPE_JSON,
            HEADER_APPLICATION: self._application_key
        }
        try:
            prepared = self.session.prepare_request(
                requests.Request(method, f"{self.endpoint}{path}", data=body or None, headers=headers)
            )
            if authenticated:
                prepared.headers.update(self._sign_headers(consumer_key, method, prepared.url, body))
        except (requests.RequestException, ValueError) as e:
            logger.warning("%s invalid request: %s", log_prefix, e)
            return APIResponse(error=e)

        try:
            response = self.session.send(prepared, timeout=self.config['timeout'])
        except requests.RequestException as e:
            logger.warning("%s request failed: %s", log_prefix, e)
            return APIResponse(error=e, request=prepared)

        logger.debug("%s done, response: %s", log_prefix, response.status_code)
        result, error = self._interpret_response(response)
        if error is not None:
            logger.warning("%s %s", log_prefix, error)
        return APIResponse(result, error, prepared, response)

    # Callback delivery

    def _dispatch(self, callback: Callable, *args):
        """Run a callback, through the configured dispatcher if any."""
        def invoke():
            try:
                callback(*args)
            except Exception:
                logger.exception("callback %r raised", callback)

        dispatcher = self.config['callback_dispatcher']
        if dispatcher is None:
            invoke()
        else:
            dispatcher(invoke)

    def _call(self, method: str, path: str, content=None, authenticated: bool = True,
              callback: Optional[ResultCallback] = None) -> "Future[APIResponse]":
        """Run a request on the worker pool and deliver its outcome."""
        def run() -> APIResponse:
            outcome = self._raw_call(method, path, content, authenticated)
            if callback is not None:
                self._dispatch(callback, outcome.result, outcome.error, outcome.request, outcome.response)
            return outcome

        return self.executor.submit(run)

    # Public API

    def get(self, path: str, callback: Optional[ResultCallback] = None) -> "Future[APIResponse]":
        """Make authenticated GET request."""
        return self._call('GET', path, callback=callback)

    def post(self, path: str, content=None, callback: Optional[ResultCallback] = None) -> "Future[APIResponse]":
        """Make authenticated POST request."""
        return self._call('POST', path, content, callback=callback)

    def put(self, path: str, content=None, callback: Optional[ResultCallback] = None) -> "Future[APIResponse]":
        """Make authenticated PUT request."""
        return self._call('PUT', path, content, callback=callback)

    def delete(self, path: str, callback: Optional[ResultCallback] = None) -> "Future[APIResponse]":
        """Make authenticated DELETE request."""
        return self._call('DELETE', path, callback=callback)

    def request_credentials(self, access_rules: Iterable[AccessRule], redirection: str,
                            callback: Optional[CredentialsCallback] = None) -> "Future[CredentialsResult]":
        """
        Request a consumer key granting the given access rules.

        On success the client stores the new consumer key right away, but the
        API only honours it once the user has approved it at the returned
        validation URL. Call abandon_credentials() if the user gives up.

        Args:
            access_rules: Rules the application needs
            redirection: URL the user is sent to after validation
            callback: Called with (consumer_key, validation_url, error)

        Returns:
            Future resolving to a CredentialsResult
        """
        content = {
            "accessRules": [rule.to_dict() for rule in access_rules],
            "redirection": redirection
        }
        previous_consumer_key = self.consumer_key

        def run() -> CredentialsResult:
            logger.info("requesting credentials...")
            outcome = self._raw_call('POST', AUTH_CREDENTIAL_PATH, content, authenticated=False)
            result = self._credentials_result(outcome, previous_consumer_key)
            if callback is not None:
                self._dispatch(callback, result.consumer_key, result.validation_url, result.error)
            return result

        return self.executor.submit(run)

    def _credentials_result(self, outcome: APIResponse, previous_consumer_key: Optional[str]) -> CredentialsResult:
        """Turn a /auth/credential outcome into a CredentialsResult, storing the new key."""
        result = CredentialsResult(
            request=outcome.request,
            response=outcome.response,
            previous_consumer_key=previous_consumer_key
        )
        if outcome.error is not None:
            logger.warning("error while requesting credentials: %s", outcome.error)
            result.error = outcome.error
            return result

        body = outcome.result
        consumer_key = body.get('consumerKey') if isinstance(body, dict) else None
        validation_url = body.get('validationUrl') if isinstance(body, dict) else None
        if not isinstance(consumer_key, str) or not isinstance(validation_url, str):
            logger.warning("got invalid response while requesting credentials")
            result.error = InvalidResponseError("expected consumerKey and validationUrl")
            return result

        self.consumer_key = consumer_key
        result.consumer_key = consumer_key
        result.validation_url = validation_url
        logger.info("request credentials done, validation url: %s", validation_url)
        return result

    def abandon_credentials(self, result: CredentialsResult) -> bool:
        """
        Restore the consumer key held before a credential request.

        Use when the user cancels the validation of the new key. Nothing
        changes if the client no longer holds the key of that request.

        Returns:
            True if the previous key was restored
        """
        if result.consumer_key is None or self.consumer_key != result.consumer_key:
            return False
        self.consumer_key = result.previous_consumer_key
        logger.info("credential request abandoned, consumer key restored")
        return True

    def close(self):
        """Shut down the worker threads and close the HTTP session."""
        self.executor.shutdown(wait=True)
        if self.session:
            self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
