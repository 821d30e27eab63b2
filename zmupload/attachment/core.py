"""Attachment handle returned by the upload endpoint."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class Attachment(BaseModel):
    """A file accepted by the mail server.

    The server describes each uploaded file with short keys; the model reads
    them through aliases and falls back to empty values for missing or null
    keys.

    Attributes:
        attachment_id: Server-assigned attachment id (``aid``), used to reference
            the upload in later API calls.
        file_name: Name of the uploaded file (``filename``).
        content_type: MIME type recorded by the server (``ct``).
        size: Size in bytes (``s``).

    Example:
        >>> Attachment.from_payload({"aid": "A1", "filename": "f.txt", "ct": "text/plain", "s": 12})
        Attachment(attachment_id='A1', file_name='f.txt', content_type='text/plain', size=12)
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    attachment_id: str = Field(default="", alias="aid")
    file_name: str = Field(default="", alias="filename")
    content_type: str = Field(default="", alias="ct")
    size: int = Field(default=0, alias="s", ge=0)

    @field_validator("attachment_id", "file_name", "content_type", "size", mode="before")
    @classmethod
    def null_to_default(cls, v: Any, info: ValidationInfo) -> Any:
        """Treat a JSON null like a missing key."""
        if v is None:
            return cls.model_fields[info.field_name].default
        return v

    @classmethod
    def from_payload(cls, payload: Any) -> Attachment:
        """Build an Attachment from one decoded JSON record.

        Raises:
            pydantic.ValidationError: If the record is not an object or a
                field has an unusable value.
        """
        return cls.model_validate(payload)

    def to_dict(self) -> dict[str, Any]:
        """Return the record using the server's short keys."""
        return self.model_dump(by_alias=True)
