"""Upload files to a mail server attachment endpoint.

Example::

    from zmupload import UploadClient, UploadRequest

    client = UploadClient("https://mail.example.com/service/upload", auth_token)
    for attachment in client.upload(UploadRequest(["report.pdf", "photo.png"])):
        print(attachment.attachment_id, attachment.file_name)
"""

from zmupload.attachment import Attachment, lookup_mime_type
from zmupload.client import UploadClient
from zmupload.config import UploadConfig, client_from_config
from zmupload.errors import (
    InvalidResourceError,
    ResponseParseError,
    UploadError,
    UploadValidationError,
)
from zmupload.multipart import MultipartEncoder, MultipartStream
from zmupload.request import UploadRequest
from zmupload.request_context import RequestContext
from zmupload.response import ResponseExtractor, parse_response
from zmupload.transport import HttpTransport, RequestsTransport

__all__ = [
    "Attachment",
    "HttpTransport",
    "InvalidResourceError",
    "MultipartEncoder",
    "MultipartStream",
    "RequestContext",
    "RequestsTransport",
    "ResponseExtractor",
    "ResponseParseError",
    "UploadClient",
    "UploadConfig",
    "UploadError",
    "UploadRequest",
    "UploadValidationError",
    "client_from_config",
    "lookup_mime_type",
    "parse_response",
]
