"""Tests for upload response parsing."""

import re

import pytest

from zmupload.attachment import Attachment
from zmupload.errors import ResponseParseError
from zmupload.response import ResponseExtractor, parse_response, status_code

EXPECTED = Attachment(attachment_id="A1", file_name="f.txt", content_type="text/plain", size=12)


class TestParseResponse:
    """Payload extraction with the default settings."""

    def test_array_payload(self):
        """Test the documented array response."""
        body = '200,"req-1",[{"aid":"A1","filename":"f.txt","ct":"text/plain","s":12}]'
        assert parse_response(body) == [EXPECTED]

    def test_single_object_payload(self):
        """Test that a bare object yields a one-element list."""
        body = '200,"req-1",{"aid":"A1","filename":"f.txt","ct":"text/plain","s":12}'
        assert parse_response(body) == [EXPECTED]

    def test_multiple_records_keep_order(self):
        """Test that records are returned in payload order."""
        body = (
            "200,'req-2',["
            '{"aid":"A1","ct":"text/plain","filename":"a.txt","s":1},'
            '{"aid":"A2","ct":"image/png","filename":"b.png","s":2}'
            "]"
        )
        attachments = parse_response(body)
        assert [a.attachment_id for a in attachments] == ["A1", "A2"]
        assert [a.file_name for a in attachments] == ["a.txt", "b.png"]

    def test_missing_fields_default(self):
        """Test that absent keys default instead of failing."""
        attachments = parse_response('200,"r",[{"aid":"A1"},{"filename":"x"}]')
        assert attachments == [
            Attachment(attachment_id="A1"),
            Attachment(file_name="x"),
        ]

    def test_null_fields_default(self):
        """Test that null values default like absent keys."""
        attachments = parse_response('200,"r",[{"aid":"A1","filename":null,"ct":null,"s":null}]')
        assert attachments == [Attachment(attachment_id="A1")]

    @pytest.mark.parametrize(
        "body",
        ['200,"req-1",[]', '200,"req-1"', "", "200", "404,'req-1'", "<html>error</html>"],
    )
    def test_no_payload_is_empty(self, body: str):
        """Test that a body without a payload yields no attachments."""
        assert parse_response(body) == []

    def test_malformed_json_raises(self):
        """Test that a matched but invalid payload is reported."""
        with pytest.raises(ResponseParseError, match="Invalid JSON") as exc_info:
            parse_response('200,"req-1",[{"aid":"A1",}]')
        assert exc_info.value.payload == '[{"aid":"A1",}]'
        assert exc_info.value.__cause__ is not None

    def test_invalid_record_raises(self):
        """Test that a record failing validation is reported."""
        with pytest.raises(ResponseParseError, match="Unexpected attachment record"):
            parse_response('200,"req-1",[{"aid":"A1","s":-5}]')

    def test_parse_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_response('200,"x",{not json}')


class TestResponseExtractor:
    """Extractor settings."""

    def test_prefix_is_skipped(self):
        """Test that matches inside the skipped prefix are ignored."""
        body = '[{"aid":"A1"}]'
        assert ResponseExtractor().parse(body) == []
        assert ResponseExtractor(skip=0).parse(body) == [Attachment(attachment_id="A1")]

    def test_array_preferred_over_object(self):
        """Test that an array later in the body wins over an earlier object."""
        body = '200,"{r}",[{"aid":"A1"}]'
        assert ResponseExtractor().parse(body) == [Attachment(attachment_id="A1")]

    def test_custom_patterns(self):
        """Test that the payload pattern is configurable."""
        extractor = ResponseExtractor(patterns=[re.compile(r"<(.*)>")])
        assert extractor.find_payload("200,<[1, 2]>") == "<[1, 2]>"

    def test_non_object_records_raise(self):
        """Test that records which are not objects are rejected."""
        extractor = ResponseExtractor(patterns=[re.compile(r"\[.*\]")])
        with pytest.raises(ResponseParseError):
            extractor.parse('200,"r",["A1","A2"]')

    def test_negative_skip_rejected(self):
        with pytest.raises(ValueError):
            ResponseExtractor(skip=-1)


@pytest.mark.parametrize(
    ("body", "expected"),
    [
        ('200,"req-1",[]', 200),
        (" 413,'r'", 413),
        ("[{}]", None),
        ("", None),
    ],
)
def test_status_code(body: str, expected):
    assert status_code(body) == expected
