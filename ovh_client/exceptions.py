"""
Custom exceptions for the OVH API client library.

Errors other than ConfigurationError are delivered in the call result
rather than raised, so each one also works as a plain value.
"""

from typing import Optional


class OVHAPIError(Exception):
    """Base exception for OVH API client errors."""
    pass


class ConfigurationError(OVHAPIError):
    """Raised when client configuration is invalid."""
    pass


class MissingApplicationKeyError(OVHAPIError):
    """The application key is empty."""

    def __init__(self):
        super().__init__("Application key is missing")


class MissingApplicationSecretError(OVHAPIError):
    """The application secret is empty."""

    def __init__(self):
        super().__init__("Application secret is missing")


class MissingConsumerKeyError(OVHAPIError):
    """An authenticated call was made without a consumer key."""

    def __init__(self):
        super().__init__("Consumer key is missing")


class InvalidResponseError(OVHAPIError):
    """The response body does not have the shape expected for the endpoint."""

    def __init__(self, detail: Optional[str] = None):
        super().__init__("Invalid response")
        self.detail = detail


class HTTPError(OVHAPIError):
    """The server answered with an HTTP status >= 400 and no error body."""

    def __init__(self, code: int):
        super().__init__(f"HTTP error {code}")
        self.code = code

    def __eq__(self, other):
        return type(other) is type(self) and other.code == self.code

    def __hash__(self):
        return hash((type(self), self.code))


class RequestError(OVHAPIError):
    """
    The server answered with an HTTP status >= 400 and a JSON error body.

    Attributes:
        code: HTTP status code of the response
        http_code: "httpCode" field of the body (e.g. "403 Forbidden")
        error_code: "errorCode" field of the body (e.g. "INVALID_KEY")
        message: "message" field of the body
    """

    def __init__(self, code: int, http_code: Optional[str] = None,
                 error_code: Optional[str] = None, message: Optional[str] = None):
        super().__init__(message or "")
        self.code = code
        self.http_code = http_code
        self.error_code = error_code
        self.message = message

    def __eq__(self, other):
        return type(other) is type(self) and (
            (other.code, other.http_code, other.error_code, other.message)
            == (self.code, self.http_code, self.error_code, self.message)
        )

    def __hash__(self):
        return hash((type(self), self.code, self.http_code, self.error_code, self.message))

    def __repr__(self):
        return (f"RequestError(code={self.code!r}, http_code={self.http_code!r}, "
                f"error_code={self.error_code!r}, message={self.message!r})")
