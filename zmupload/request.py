"""Upload request value object."""

from __future__ import annotations

import os
import secrets
import uuid
from pathlib import Path
from typing import Optional, Sequence, Union

ACCOUNT_AUTH_TOKEN = "ZM_AUTH_TOKEN"
ADMIN_AUTH_TOKEN = "ZM_ADMIN_AUTH_TOKEN"

FileRef = Union[str, "os.PathLike[str]"]


def auth_token_cookie(auth_token: str, is_admin: bool = False) -> str:
    """Compose the Cookie header value carrying a mail server auth token.

    Args:
        auth_token: Raw auth token; surrounding whitespace is removed.
        is_admin: Use the admin token cookie name instead of the account one.

    Returns:
        ``ZM_AUTH_TOKEN=<token>`` or ``ZM_ADMIN_AUTH_TOKEN=<token>``.
    """
    name = ADMIN_AUTH_TOKEN if is_admin else ACCOUNT_AUTH_TOKEN
    return f"{name}={auth_token.strip()}"


def generate_request_id() -> str:
    """Return a new random request id, unique within the process."""
    return secrets.token_hex(8) + uuid.uuid4().hex


class UploadRequest:
    """Files to upload together with the request correlation id.

    Args:
        files: Paths of the files to upload, in upload order.
        request_id: Correlation id echoed back by the server. Generated on
            first access when empty.
        auth_token: Optional auth token overriding the client's one.
        is_admin: Whether ``auth_token`` is an admin token.

    Example:
        >>> request = UploadRequest(["/tmp/report.pdf"])
        >>> request.get_request_id() == request.get_request_id()
        True
    """

    def __init__(
        self,
        files: Sequence[FileRef] = (),
        request_id: str = "",
        auth_token: str = "",
        is_admin: bool = False,
    ) -> None:
        self._files = tuple(Path(file) for file in files)
        self._request_id: Optional[str] = request_id or None
        self.auth_token = auth_token.strip()
        self.is_admin = is_admin

    def get_files(self) -> list[Path]:
        """Return the files that currently exist as regular files.

        Checked on every call: a file removed after the request was created is
        silently left out.
        """
        return [file for file in self._files if file.is_file()]

    def get_request_id(self) -> str:
        """Return the request id, generating and caching it on first access."""
        if self._request_id is None:
            self._request_id = generate_request_id()
        return self._request_id

    def get_auth_token_cookie(self) -> Optional[str]:
        """Return the Cookie value for this request's own token, if it has one."""
        if not self.auth_token:
            return None
        return auth_token_cookie(self.auth_token, self.is_admin)

    def __repr__(self) -> str:
        return (
            f"UploadRequest(files={[str(file) for file in self._files]!r}, "
            f"request_id={self._request_id!r}, is_admin={self.is_admin!r})"
        )
