"""Fake HTTP transport for client tests."""

from __future__ import annotations

from typing import Optional

import requests


def make_response(body: str, status_code: int = 200) -> requests.Response:
    """Build a requests.Response carrying the given text body."""
    response = requests.Response()
    response.status_code = status_code
    response._content = body.encode("utf-8")
    response.encoding = "utf-8"
    return response


class FakeTransport:
    """Transport that records requests and answers with a canned body.

    The request body is a single pass stream closed once the upload returns,
    so it is drained here and kept in ``bodies``.
    """

    def __init__(self, body: str = "", error: Optional[Exception] = None):
        self.body = body
        self.error = error
        self.requests: list[requests.PreparedRequest] = []
        self.bodies: list[bytes] = []
        self.responses: list[requests.Response] = []

    def send(self, request: requests.PreparedRequest) -> requests.Response:
        self.requests.append(request)
        self.bodies.append(b"".join(request.body))
        if self.error is not None:
            raise self.error
        response = make_response(self.body)
        self.responses.append(response)
        return response
