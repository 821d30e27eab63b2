"""Tests for the Attachment record."""

import pytest
from pydantic import ValidationError

from zmupload.attachment import Attachment


class TestAttachment:
    """Attachment construction and mapping tests."""

    def test_from_payload_uses_short_keys(self):
        """Test that server keys populate the fields."""
        attachment = Attachment.from_payload(
            {"aid": "A1", "filename": "f.txt", "ct": "text/plain", "s": 12}
        )
        assert attachment.attachment_id == "A1"
        assert attachment.file_name == "f.txt"
        assert attachment.content_type == "text/plain"
        assert attachment.size == 12

    def test_missing_fields_default(self):
        """Test that absent keys fall back to empty values."""
        attachment = Attachment.from_payload({"aid": "A1"})
        assert attachment == Attachment(attachment_id="A1", file_name="", content_type="", size=0)

    def test_unknown_keys_ignored(self):
        """Test that extra keys sent by the server are ignored."""
        attachment = Attachment.from_payload({"aid": "A1", "mid": "257", "ver": "1"})
        assert attachment.attachment_id == "A1"

    def test_construct_by_field_name(self):
        """Test that fields can be given by their Python names."""
        attachment = Attachment(attachment_id="A2", file_name="x.png", content_type="image/png", size=3)
        assert attachment.to_dict() == {"aid": "A2", "filename": "x.png", "ct": "image/png", "s": 3}

    def test_equality_is_field_equality(self):
        """Test that two records with the same fields are equal."""
        assert Attachment(attachment_id="A") == Attachment.from_payload({"aid": "A"})
        assert Attachment(attachment_id="A") != Attachment(attachment_id="B")

    def test_is_immutable(self):
        """Test that fields cannot be reassigned."""
        attachment = Attachment(attachment_id="A")
        with pytest.raises(ValidationError):
            attachment.attachment_id = "B"  # type: ignore[misc]

    def test_negative_size_rejected(self):
        """Test that size must not be negative."""
        with pytest.raises(ValidationError):
            Attachment.from_payload({"aid": "A", "s": -1})

    def test_non_object_payload_rejected(self):
        """Test that a record must be an object."""
        with pytest.raises(ValidationError):
            Attachment.from_payload("A1")
