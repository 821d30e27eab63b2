"""HTTP transport used to send upload requests."""

from __future__ import annotations

import logging
from typing import Optional, Protocol, Union, runtime_checkable

import requests

logger = logging.getLogger(__name__)

# Seconds; a single value applies to both connect and read
DEFAULT_TIMEOUT = 30.0

Timeout = Union[float, tuple[float, float], None]


@runtime_checkable
class HttpTransport(Protocol):
    """Sends a prepared HTTP request and returns the response.

    Implementations must not retry and must not interpret status codes;
    failures are raised to the caller as they are.
    """

    def send(self, request: requests.PreparedRequest) -> requests.Response:
        """Send the request.

        Args:
            request: Prepared request whose body may be a lazy stream.

        Returns:
            The server response.
        """
        ...


class RequestsTransport:
    """Transport backed by a ``requests.Session``.

    Args:
        session: Session to send through. A new one is created and owned by the
            transport when omitted.
        timeout: Timeout passed to ``Session.send``.
        verify: TLS certificate verification, as accepted by ``requests``.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Timeout = DEFAULT_TIMEOUT,
        verify: Union[bool, str] = True,
    ) -> None:
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.verify = verify

    def send(self, request: requests.PreparedRequest) -> requests.Response:
        logger.debug("%s %s", request.method, request.url)
        return self.session.send(request, timeout=self.timeout, verify=self.verify)

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> RequestsTransport:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
