import pytest

from zmupload.attachment import MIME_TYPES, get_extension, lookup_mime_type


class TestLookupMimeType:
    """Tests for extension based MIME type lookup."""

    @pytest.mark.parametrize(
        ("filename", "expected"),
        [
            ("image.png", "image/png"),
            ("report.pdf", "application/pdf"),
            ("archive.tar", "application/x-tar"),
            ("song.mp3", "audio/mpeg"),
            ("movie.webm", "video/webm"),
            ("font.woff", "application/x-font-woff"),
            ("page.html", "text/html"),
            ("invite.ics", "text/calendar"),
        ],
    )
    def test_known_extensions(self, filename: str, expected: str):
        """Test that common extensions resolve to their MIME types."""
        assert lookup_mime_type(filename) == expected

    def test_vendor_specific_entries(self):
        """Test the entries outside the Apache list."""
        assert lookup_mime_type("boarding.pkpass") == "application/vnd.apple.pkpass"
        assert lookup_mime_type("mail.msg") == "application/vnd.ms-outlook"

    def test_extension_is_case_insensitive(self):
        """Test that upper-case extensions are matched."""
        assert lookup_mime_type("PHOTO.JPG") == "image/jpeg"

    def test_uses_last_extension(self):
        """Test that only the text after the last dot counts."""
        assert lookup_mime_type("backup.tar.gz") == "application/gzip"

    def test_uses_final_path_segment(self):
        """Test that dots in directory names are ignored."""
        assert lookup_mime_type("/srv/v1.2/README") is None
        assert lookup_mime_type("C:\\docs.old\\notes.txt") == "text/plain"

    @pytest.mark.parametrize("filename", ["", "README", "file.unknownext", "trailing."])
    def test_unknown_returns_none(self, filename: str):
        """Test that a missing or unknown extension is not an error."""
        assert lookup_mime_type(filename) is None


def test_get_extension():
    assert get_extension("a/b/Report.PDF") == "pdf"
    assert get_extension("noext") == ""


def test_mime_table_is_read_only():
    assert len(MIME_TYPES) > 90
    with pytest.raises(TypeError):
        MIME_TYPES["exe"] = "application/x-msdownload"  # type: ignore[index]
