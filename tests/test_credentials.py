"""
Tests for the credential handshake and the credential loaders.
"""

import json
import plistlib
from unittest.mock import Mock, patch

import pytest
import requests

from ovh_client import (
    OVHClient,
    Endpoint,
    AccessRule,
    Method,
    Credentials,
    CredentialsResult,
    InvalidResponseError,
    RequestError,
    all_rights,
    read_only_rights,
    load_credentials,
    credentials_from_env
)
from ovh_client.constants import HEADER_APPLICATION, HEADER_SIGNATURE, HEADER_CONSUMER

TIMEOUT = 5
REDIRECTION = "https://www.ovh.com/fr/"
VALIDATION_URL = "https://eu.api.ovh.com/auth/?credentialToken=abc"


class TestRequestCredentials:
    """Test the consumer key handshake."""

    @pytest.fixture
    def client(self):
        client = OVHClient(Endpoint.OVH_EU, "app-key", "app-secret")
        yield client
        client.close()

    @pytest.fixture
    def credential_route(self, fake_server, make_response):
        fake_server.routes["/auth/credential"] = make_response(200, {
            "consumerKey": "new-consumer-key",
            "validationUrl": VALIDATION_URL,
            "state": "pendingValidation"
        })
        return fake_server

    @patch('ovh_client.client.requests.Session.send')
    def test_request_credentials(self, mock_send, client, credential_route):
        """A successful request stores the consumer key on the client."""
        mock_send.side_effect = credential_route

        result = client.request_credentials(all_rights(), REDIRECTION).result(timeout=TIMEOUT)

        assert result.ok
        assert result.consumer_key == "new-consumer-key"
        assert result.validation_url == VALIDATION_URL
        assert result.previous_consumer_key is None
        assert client.consumer_key == "new-consumer-key"

    @patch('ovh_client.client.requests.Session.send')
    def test_request_body(self, mock_send, client, credential_route):
        """Access rules are sent in order, unauthenticated."""
        mock_send.side_effect = credential_route
        rules = [AccessRule(Method.GET, "/vps*"), AccessRule("delete", "/vps/*/snapshot"), AccessRule(Method.PUT, "/me")]

        result = client.request_credentials(rules, REDIRECTION).result(timeout=TIMEOUT)

        # No clock synchronisation for an unauthenticated call
        assert credential_route.paths() == ["/auth/credential"]

        request = result.request
        assert request.method == 'POST'
        assert request.url == "https://api.ovh.com/1.0/auth/credential"
        assert request.headers[HEADER_APPLICATION] == "app-key"
        assert HEADER_SIGNATURE not in request.headers
        assert HEADER_CONSUMER not in request.headers
        assert json.loads(request.body) == {
            "accessRules": [
                {"method": "GET", "path": "/vps*"},
                {"method": "DELETE", "path": "/vps/*/snapshot"},
                {"method": "PUT", "path": "/me"}
            ],
            "redirection": REDIRECTION
        }

    @patch('ovh_client.client.requests.Session.send')
    def test_callback(self, mock_send, client, credential_route):
        """The callback receives consumer key, validation URL and error."""
        mock_send.side_effect = credential_route
        callback = Mock()

        client.request_credentials(read_only_rights(), REDIRECTION, callback=callback).result(timeout=TIMEOUT)

        callback.assert_called_once_with("new-consumer-key", VALIDATION_URL, None)

    @pytest.mark.parametrize("body", [
        ["new-consumer-key", VALIDATION_URL],
        {"consumerKey": "new-consumer-key"},
        {"validationUrl": VALIDATION_URL},
        {"consumerKey": 42, "validationUrl": VALIDATION_URL},
    ])
    @patch('ovh_client.client.requests.Session.send')
    def test_invalid_response(self, mock_send, body, client, fake_server, make_response):
        """A body without both fields is an invalid response."""
        fake_server.routes["/auth/credential"] = make_response(200, body)
        mock_send.side_effect = fake_server
        callback = Mock()

        result = client.request_credentials(all_rights(), REDIRECTION, callback=callback).result(timeout=TIMEOUT)

        assert isinstance(result.error, InvalidResponseError)
        assert result.consumer_key is None
        assert client.consumer_key is None
        callback.assert_called_once_with(None, None, result.error)

    @patch('ovh_client.client.requests.Session.send')
    def test_request_error(self, mock_send, client, fake_server, make_response):
        """Server errors are delivered and the key is left untouched."""
        fake_server.routes["/auth/credential"] = make_response(400, {
            "httpCode": "400 Bad Request",
            "errorCode": "INVALID_ARGUMENT",
            "message": "Invalid redirection"
        })
        mock_send.side_effect = fake_server
        client.consumer_key = "old-key"

        result = client.request_credentials(all_rights(), "not-a-url").result(timeout=TIMEOUT)

        assert result.error == RequestError(400, "400 Bad Request", "INVALID_ARGUMENT", "Invalid redirection")
        assert client.consumer_key == "old-key"
        with pytest.raises(RequestError):
            result.raise_for_error()

    @patch('ovh_client.client.requests.Session.send')
    def test_transport_error(self, mock_send, client):
        failure = requests.ConnectionError("no route to host")
        mock_send.side_effect = failure

        result = client.request_credentials(all_rights(), REDIRECTION).result(timeout=TIMEOUT)

        assert result.error is failure

    def test_missing_application_key(self):
        """The handshake needs the application key but no consumer key."""
        with patch('ovh_client.client.requests.Session.send') as mock_send:
            with OVHClient(Endpoint.OVH_EU, "", "app-secret") as client:
                result = client.request_credentials(all_rights(), REDIRECTION).result(timeout=TIMEOUT)

        assert str(result.error) == "Application key is missing"
        mock_send.assert_not_called()

    @patch('ovh_client.client.requests.Session.send')
    def test_abandon_credentials(self, mock_send, client, credential_route):
        """Abandoning a request restores the previous consumer key."""
        mock_send.side_effect = credential_route
        client.consumer_key = "old-key"

        result = client.request_credentials(all_rights(), REDIRECTION).result(timeout=TIMEOUT)
        assert client.consumer_key == "new-consumer-key"
        assert result.previous_consumer_key == "old-key"

        assert client.abandon_credentials(result) is True
        assert client.consumer_key == "old-key"

    def test_abandon_credentials_after_key_changed(self, client):
        """A key set since the request is kept."""
        result = CredentialsResult(consumer_key="issued-key", validation_url=VALIDATION_URL,
                                   previous_consumer_key=None)
        client.consumer_key = "other-key"

        assert client.abandon_credentials(result) is False
        assert client.consumer_key == "other-key"

    def test_abandon_failed_request(self, client):
        client.consumer_key = "old-key"

        assert client.abandon_credentials(CredentialsResult(error=InvalidResponseError())) is False
        assert client.consumer_key == "old-key"


class TestCredentialLoaders:
    """Test loading credentials from files and environment."""

    def test_load_credentials(self, tmp_path):
        path = tmp_path / "Credentials.plist"
        with open(path, 'wb') as fp:
            plistlib.dump({
                "ApplicationKey": "app-key",
                "ApplicationSecret": "app-secret",
                "ConsumerKey": "consumer-key"
            }, fp)

        assert load_credentials(str(path)) == Credentials("app-key", "app-secret", "consumer-key")

    def test_load_credentials_partial(self, tmp_path):
        """Missing entries load as empty values."""
        path = tmp_path / "Credentials.plist"
        with open(path, 'wb') as fp:
            plistlib.dump({"ApplicationKey": "app-key", "ConsumerKey": ""}, fp)

        credentials = load_credentials(str(path))

        assert credentials.application_key == "app-key"
        assert credentials.application_secret == ""
        assert credentials.consumer_key is None

    def test_load_credentials_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_credentials(str(tmp_path / "missing.plist"))

    def test_credentials_from_env(self):
        environ = {
            "OVH_APPLICATION_KEY": "app-key",
            "OVH_APPLICATION_SECRET": "app-secret"
        }

        assert credentials_from_env(environ) == Credentials("app-key", "app-secret", None)

    def test_client_from_credentials(self):
        credentials = Credentials("app-key", "app-secret", "consumer-key")

        with OVHClient.from_credentials("kimsufi-eu", credentials, timeout=10) as client:
            assert client.endpoint == "https://eu.api.kimsufi.com/1.0"
            assert client.application_key == "app-key"
            assert client.consumer_key == "consumer-key"
            assert client.config['timeout'] == 10
