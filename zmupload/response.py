"""Extraction of attachment records from upload responses.

The upload endpoint, queried with ``fmt=raw,extended``, answers with an
envelope that is not JSON itself: a status code, the echoed request id and
then the JSON payload, e.g.::

    200,"req-1",[{"aid":"A1","filename":"f.txt","ct":"text/plain","s":12}]

The envelope format is inferred from observed responses rather than from a
published protocol, so extraction is a heuristic: skip a few leading
characters, take the first bracketed array of objects (or, failing that, the
first object) and decode it. Both the skip offset and the patterns can be
changed per extractor.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional, Pattern, Sequence

from pydantic import ValidationError

from zmupload.attachment import Attachment
from zmupload.errors import ResponseParseError

logger = logging.getLogger(__name__)

# Tried in order; the first pattern with a match wins
DEFAULT_PAYLOAD_PATTERNS: tuple[Pattern[str], ...] = (
    re.compile(r"\[\{.*\}\]"),
    re.compile(r"\{.*\}"),
)

# Characters skipped before searching, enough to step over the status code
DEFAULT_SKIP = 3

_STATUS_PATTERN = re.compile(r"\s*(\d{3})\b")


def status_code(raw_body: str) -> Optional[int]:
    """Return the status code leading the response envelope, if any."""
    match = _STATUS_PATTERN.match(raw_body)
    return int(match.group(1)) if match else None


class ResponseExtractor:
    """Decodes the attachment payload embedded in an upload response body.

    Args:
        patterns: Regular expressions locating the JSON payload, tried in order.
        skip: Number of leading characters ignored before searching.
    """

    def __init__(
        self,
        patterns: Sequence[Pattern[str]] = DEFAULT_PAYLOAD_PATTERNS,
        skip: int = DEFAULT_SKIP,
    ) -> None:
        if skip < 0:
            raise ValueError(f"skip must not be negative, got {skip}")
        self.patterns = tuple(patterns)
        self.skip = skip

    def find_payload(self, raw_body: str) -> Optional[str]:
        """Return the first payload fragment found after the skip offset."""
        for pattern in self.patterns:
            match = pattern.search(raw_body, self.skip)
            if match:
                return match.group(0)
        return None

    def parse(self, raw_body: str) -> list[Attachment]:
        """Parse a response body into attachments.

        Returns:
            Attachments in payload order. Empty when the body carries no
            payload, which is a valid response.

        Raises:
            ResponseParseError: If the payload is not valid JSON or a record
                cannot be mapped to an Attachment.
        """
        payload = self.find_payload(raw_body)
        if payload is None:
            logger.debug("No attachment payload found in response body")
            return []

        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            raise ResponseParseError(
                f"Invalid JSON in upload response payload: {e}", payload
            ) from e

        records: list[Any] = data if isinstance(data, list) else [data]
        try:
            return [Attachment.from_payload(record) for record in records]
        except ValidationError as e:
            raise ResponseParseError(
                f"Unexpected attachment record in upload response: {e}", payload
            ) from e


_default_extractor = ResponseExtractor()


def parse_response(raw_body: str) -> list[Attachment]:
    """Parse a response body with the default extraction settings."""
    return _default_extractor.parse(raw_body)
