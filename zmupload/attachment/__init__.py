"""Attachment records and MIME type lookup for uploads.

Example:
    >>> from zmupload.attachment import Attachment, lookup_mime_type
    >>> lookup_mime_type("image.png")
    'image/png'
    >>> Attachment(attachment_id="A1", file_name="image.png").size
    0
"""

from zmupload.attachment.core import Attachment
from zmupload.attachment.mime_types import MIME_TYPES, get_extension, lookup_mime_type

__all__ = [
    "Attachment",
    "MIME_TYPES",
    "get_extension",
    "lookup_mime_type",
]
