"""
Shared fixtures for the OVH API client tests.
"""

import json

import pytest
import requests

SERVER_TIME = 1700000100


def build_response(status=200, body=None, text=None):
    """Build a real requests.Response with the given status and body."""
    response = requests.Response()
    response.status_code = status
    if body is not None:
        response._content = json.dumps(body).encode('utf-8')
    elif text is not None:
        response._content = text.encode('utf-8')
    else:
        response._content = b''
    response.encoding = 'utf-8'
    return response


@pytest.fixture
def make_response():
    """Factory for HTTP responses returned by the mocked transport."""
    return build_response


@pytest.fixture
def fake_server():
    """
    Route mocked Session.send calls by path.

    Register responses with ``fake_server.routes[path] = response`` (or a
    callable taking the prepared request); every prepared request is kept
    in ``fake_server.requests``.
    """
    class FakeServer:
        def __init__(self):
            self.routes = {"/auth/time": lambda request: build_response(text=str(SERVER_TIME))}
            self.requests = []

        def paths(self):
            return [request.path_url.split('/1.0', 1)[-1] for request in self.requests]

        def __call__(self, request, **kwargs):
            self.requests.append(request)
            path = request.path_url.split('/1.0', 1)[-1]
            route = self.routes.get(path)
            if route is None:
                return build_response(404, {"message": "Not found"})
            if isinstance(route, BaseException):
                raise route
            return route(request) if callable(route) else route

    return FakeServer()
