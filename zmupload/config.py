"""Configuration for the upload client.

Settings are pydantic models with upper-case aliases, loaded from YAML::

    UPLOAD_URL: https://mail.example.com/service/upload
    AUTH_TOKEN: 0_abc123
    IS_ADMIN: false
    TIMEOUT: 60
"""

import sys
import typing as t
from urllib.parse import urlparse

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from zmupload.client import UploadClient
from zmupload.multipart import CHUNK_SIZE
from zmupload.request_context import RequestContext
from zmupload.response import DEFAULT_SKIP, ResponseExtractor
from zmupload.transport import DEFAULT_TIMEOUT, RequestsTransport


class StrictBaseModel(BaseModel):
    """Base model with immutable (frozen) configuration."""

    model_config = ConfigDict(frozen=True)


class UploadConfig(StrictBaseModel):
    """Upload client configuration.

    Attributes:
        upload_url: Upload endpoint URL (http or https)
        auth_token: Auth token sent in the Cookie header
        is_admin: Whether the auth token is an admin token
        timeout: Transport timeout in seconds
        verify_tls: Verify the server's TLS certificate
        chunk_size: Bytes copied at a time when streaming files
        response_skip: Leading response characters skipped before searching the payload
        forward_client_context: Forward user agent and client address read from
            the process environment
    """

    upload_url: str = Field(alias="UPLOAD_URL")
    auth_token: str = Field(default="", alias="AUTH_TOKEN", repr=False)
    is_admin: bool = Field(default=False, alias="IS_ADMIN")
    timeout: float = Field(default=DEFAULT_TIMEOUT, alias="TIMEOUT", gt=0)
    verify_tls: bool = Field(default=True, alias="VERIFY_TLS")
    chunk_size: int = Field(default=CHUNK_SIZE, alias="CHUNK_SIZE", gt=0)
    response_skip: int = Field(default=DEFAULT_SKIP, alias="RESPONSE_SKIP", ge=0)
    forward_client_context: bool = Field(default=False, alias="FORWARD_CLIENT_CONTEXT")

    @field_validator("upload_url")
    @classmethod
    def validate_upload_url(cls, v: str) -> str:
        """Validate upload URL format."""
        v = v.strip()
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ValueError(f"Invalid upload URL: '{v}'. Must be http(s)://host[:port]/path")
        return v

    @classmethod
    def parse_yaml(cls, path: str) -> "UploadConfig":
        """Parse configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Validated UploadConfig instance

        Raises:
            SystemExit: If config file is not found
        """
        try:
            with open(path, "r") as f:
                return cls.model_validate(yaml.safe_load(f))
        except FileNotFoundError:
            print(f"Config file not found: {path}", file=sys.stderr)
            raise SystemExit(1)


def client_from_config(
    config: UploadConfig, environ: t.Optional[t.Mapping[str, str]] = None
) -> UploadClient:
    """Create an UploadClient from configuration.

    Args:
        config: Validated configuration
        environ: Environment read for the client context when
            ``forward_client_context`` is set. Defaults to ``os.environ``.

    Returns:
        Configured UploadClient with its own requests transport
    """
    request_context = None
    if config.forward_client_context:
        request_context = RequestContext.from_environ(environ)

    return UploadClient(
        config.upload_url,
        auth_token=config.auth_token,
        is_admin=config.is_admin,
        transport=RequestsTransport(timeout=config.timeout, verify=config.verify_tls),
        request_context=request_context,
        extractor=ResponseExtractor(skip=config.response_skip),
        chunk_size=config.chunk_size,
    )
