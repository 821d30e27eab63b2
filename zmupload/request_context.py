"""Client environment forwarded with upload requests.

When uploads are made on behalf of an end user (for instance from a web
application), the mail server can be told the user's address and agent. The
values are read from a CGI/WSGI style environment mapping and are always
optional.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

# Checked in order; the first non-empty value is used
CLIENT_IP_KEYS = (
    "HTTP_CLIENT_IP",
    "HTTP_X_FORWARDED_FOR",
    "HTTP_X_FORWARDED",
    "HTTP_FORWARDED_FOR",
    "HTTP_FORWARDED",
    "REMOTE_ADDR",
)

USER_AGENT_KEY = "HTTP_USER_AGENT"
FORWARDED_FOR_HEADER = "X-Forwarded-For"


def _first_segment(value: str) -> str:
    return value.split(",", 1)[0].strip()


@dataclass(frozen=True)
class RequestContext:
    """User agent and originating address of the end user, when known."""

    user_agent: Optional[str] = None
    client_ip: Optional[str] = None

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None) -> RequestContext:
        """Read the context from an environment mapping.

        Args:
            environ: CGI/WSGI style mapping. Defaults to ``os.environ``.
        """
        if environ is None:
            environ = os.environ

        client_ip = None
        for key in CLIENT_IP_KEYS:
            candidate = _first_segment(environ.get(key) or "")
            if candidate:
                client_ip = candidate
                break

        user_agent = (environ.get(USER_AGENT_KEY) or "").strip() or None
        return cls(user_agent=user_agent, client_ip=client_ip)

    def headers(self) -> dict[str, str]:
        """Return the HTTP headers for the values that are present."""
        headers: dict[str, str] = {}
        if self.user_agent:
            headers["User-Agent"] = self.user_agent
        if self.client_ip:
            headers[FORWARDED_FOR_HEADER] = self.client_ip
        return headers
