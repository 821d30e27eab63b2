"""Exceptions raised by the upload client.

Transport failures are not wrapped: whatever the HTTP transport raises
(``requests.RequestException`` for the default transport) reaches the caller
unchanged.
"""

from __future__ import annotations


class UploadError(Exception):
    """Base class for errors raised by zmupload."""


class UploadValidationError(UploadError, ValueError):
    """Raised when an upload request is rejected before any I/O happens."""


class ResponseParseError(UploadError, ValueError):
    """Raised when the payload found in a response body cannot be decoded.

    Attributes:
        payload: The fragment of the response body that failed to decode.
    """

    def __init__(self, message: str, payload: str = "") -> None:
        self.payload = payload
        super().__init__(message)


class InvalidResourceError(UploadError, TypeError):
    """Raised when a multipart part is given a resource of unsupported type."""

    @classmethod
    def for_resource(cls, resource: object) -> InvalidResourceError:
        """Create an InvalidResourceError describing the rejected resource."""
        return cls(
            f"Unsupported resource type '{type(resource).__name__}'. "
            f"Expected str, bytes, a path or a readable binary stream."
        )
