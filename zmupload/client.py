"""Upload client for the mail server attachment endpoint."""

from __future__ import annotations

import logging
from typing import Optional

import humanize
import requests

from zmupload.attachment import Attachment
from zmupload.errors import UploadValidationError
from zmupload.multipart import CHUNK_SIZE, MultipartEncoder
from zmupload.request import UploadRequest, auth_token_cookie
from zmupload.request_context import RequestContext
from zmupload.response import ResponseExtractor
from zmupload.transport import HttpTransport, RequestsTransport

QUERY_FORMAT = "raw,extended"
REQUEST_METHOD = "POST"
REQUEST_ID_FIELD = "requestId"
REQUIRED_FILE_MESSAGE = "Upload request must have at least one file."


def build_upload_url(upload_url: str) -> str:
    """Append the response format query parameter to the upload URL.

    The comma in the format value is kept literal.
    """
    separator = "&" if "?" in upload_url else "?"
    return f"{upload_url}{separator}fmt={QUERY_FORMAT}"


class UploadClient:
    """Uploads files and returns the attachment handles assigned by the server.

    One upload runs at a time per client; the last prepared request and the
    last response are kept for diagnostics.

    Args:
        upload_url: Upload endpoint, e.g. ``https://mail.example.com/service/upload``.
        auth_token: Auth token sent as a cookie.
        is_admin: Whether ``auth_token`` is an admin token.
        transport: HTTP transport; a ``RequestsTransport`` when omitted.
        request_context: End user context forwarded as extra headers.
        extractor: Response parser; default extraction settings when omitted.
        logger: Logger for debug events; the module logger when omitted.
        chunk_size: Number of bytes copied at a time when streaming files.

    Example::

        client = UploadClient("https://mail.example.com/service/upload", auth_token)
        attachments = client.upload(UploadRequest(["report.pdf"]))
        attachment_ids = [attachment.attachment_id for attachment in attachments]
    """

    def __init__(
        self,
        upload_url: str,
        auth_token: str = "",
        is_admin: bool = False,
        transport: Optional[HttpTransport] = None,
        request_context: Optional[RequestContext] = None,
        extractor: Optional[ResponseExtractor] = None,
        logger: Optional[logging.Logger] = None,
        chunk_size: int = CHUNK_SIZE,
    ) -> None:
        self.upload_url = upload_url.strip()
        self.cookie = auth_token_cookie(auth_token, is_admin)
        self.transport = transport if transport is not None else RequestsTransport()
        self.request_context = request_context
        self.extractor = extractor if extractor is not None else ResponseExtractor()
        self.logger = logger if logger is not None else logging.getLogger(__name__)
        self.chunk_size = chunk_size

        self.last_request: Optional[requests.PreparedRequest] = None
        self.last_response: Optional[requests.Response] = None

    def _build_encoder(self, request: UploadRequest) -> MultipartEncoder:
        encoder = MultipartEncoder(chunk_size=self.chunk_size)
        encoder.add_field(
            REQUEST_ID_FIELD,
            request.get_request_id(),
            {"Content-Type": "text/plain"},
        )
        for file in request.get_files():
            encoder.add_file(file.name, file, filename=file.name)
            size = encoder.parts[-1].size
            self.logger.debug(
                "Uploading file %s (%s)",
                file,
                humanize.naturalsize(size) if size is not None else "unknown size",
            )
        return encoder

    def _build_headers(self, request: UploadRequest, encoder: MultipartEncoder) -> dict[str, str]:
        headers = {
            "Cookie": request.get_auth_token_cookie() or self.cookie,
            "Content-Type": encoder.content_type,
        }
        if self.request_context is not None:
            headers.update(self.request_context.headers())
        return headers

    def upload(self, request: UploadRequest) -> list[Attachment]:
        """Upload the request's files.

        Args:
            request: Files and request id to send.

        Returns:
            Attachments in the order reported by the server; empty when the
            response carries none.

        Raises:
            UploadValidationError: If the request has no existing file. Raised
                before the transport is used.
            ResponseParseError: If the response payload cannot be decoded.
            requests.RequestException: Transport failures, unchanged.
        """
        if not request.get_files():
            raise UploadValidationError(REQUIRED_FILE_MESSAGE)

        encoder = self._build_encoder(request)
        url = build_upload_url(self.upload_url)

        self.last_response = None
        with encoder.build() as body:
            self.last_request = requests.Request(
                method=REQUEST_METHOD,
                url=url,
                headers=self._build_headers(request, encoder),
                data=body,
            ).prepare()
            self.logger.debug("Sending upload request to %s", url)
            self.last_response = self.transport.send(self.last_request)

        raw_body = self.last_response.text
        self.logger.debug("Response body: %s", raw_body)
        return self.extractor.parse(raw_body)
