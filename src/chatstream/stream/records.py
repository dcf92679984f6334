"""Parse NDJSON lines into stream records.

Each non-blank line is expected to be a JSON object shaped like::

    {"message": {"role": "assistant", "content": "Hel"}, "done": false}

Only ``message.content`` is interpreted.  Failures are returned as
:class:`~chatstream.types.records.Malformed` values, never raised.
"""

from __future__ import annotations

import json
from typing import Any

from chatstream.types.records import Delta, Malformed, ParseResult, Skip

BLANK = Skip("blank line")
NO_MESSAGE = Skip("no message object")
NO_CONTENT = Skip("no content")


class RecordParser:
    """Turns one line of the stream into a :data:`ParseResult`."""

    def parse(self, line: str) -> ParseResult:
        if not line.strip():
            return BLANK

        try:
            value: Any = json.loads(line)
        except json.JSONDecodeError as exc:
            return Malformed(raw=line, reason=f"invalid JSON: {exc.msg}")
        except (ValueError, RecursionError) as exc:
            # Valid JSON the decoder refuses: oversized integers, deep nesting
            return Malformed(raw=line, reason=f"undecodable JSON: {type(exc).__name__}")

        if not isinstance(value, dict):
            return Malformed(raw=line, reason=f"expected an object, got {type(value).__name__}")

        message = value.get("message")
        if not isinstance(message, dict):
            return NO_MESSAGE

        if "content" not in message or message["content"] is None:
            return NO_CONTENT

        content = message["content"]
        if not isinstance(content, str):
            return Malformed(
                raw=line, reason=f"content is {type(content).__name__}, not a string",
            )
        if not content:
            return NO_CONTENT
        return Delta(content)


def parse_record(line: str) -> ParseResult:
    """Module-level convenience wrapper around :meth:`RecordParser.parse`."""
    return _DEFAULT_PARSER.parse(line)


_DEFAULT_PARSER = RecordParser()
