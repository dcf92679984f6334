"""Tests for chatstream.stream.records."""

import pytest

from chatstream.stream.records import RecordParser, parse_record
from chatstream.types.records import Delta, Malformed, Skip


class TestRecordParser:
    def setup_method(self):
        self.parser = RecordParser()

    def test_delta(self):
        assert self.parser.parse('{"message":{"role":"assistant","content":"Hi"}}') == Delta("Hi")

    def test_delta_preserves_whitespace(self):
        assert self.parser.parse('{"message":{"content":"  \\n"}}') == Delta("  \n")

    @pytest.mark.parametrize("line", ["", " ", "\t", "\r"])
    def test_blank_is_skip(self, line):
        assert isinstance(self.parser.parse(line), Skip)

    def test_invalid_json_is_malformed(self):
        result = self.parser.parse("not json")
        assert isinstance(result, Malformed)
        assert result.raw == "not json"
        assert "invalid JSON" in result.reason

    def test_truncated_record_is_malformed(self):
        assert isinstance(self.parser.parse('{"message":{"content":"A"'), Malformed)

    def test_non_object_is_malformed(self):
        result = self.parser.parse("[1, 2]")
        assert isinstance(result, Malformed)
        assert "list" in result.reason

    def test_missing_message_is_skip(self):
        assert isinstance(self.parser.parse('{"done": true}'), Skip)

    def test_message_not_object_is_skip(self):
        assert isinstance(self.parser.parse('{"message": "hello"}'), Skip)

    def test_missing_content_is_skip(self):
        assert isinstance(self.parser.parse('{"message": {"role": "assistant"}}'), Skip)

    def test_null_content_is_skip(self):
        assert isinstance(self.parser.parse('{"message": {"content": null}}'), Skip)

    def test_empty_content_is_skip(self):
        line = '{"message":{"content":""},"done":true,"done_reason":"stop"}'
        assert isinstance(self.parser.parse(line), Skip)

    @pytest.mark.parametrize("content", ["42", "true", '["a"]', '{"x": 1}'])
    def test_non_string_content_is_malformed(self, content):
        line = '{"message": {"content": ' + content + "}}"
        result = self.parser.parse(line)
        assert isinstance(result, Malformed)
        assert "not a string" in result.reason

    def test_trailing_carriage_return(self):
        assert self.parser.parse('{"message":{"content":"A"}}\r') == Delta("A")

    def test_unicode_escape(self):
        assert self.parser.parse('{"message":{"content":"caf\\u00e9"}}') == Delta("café")

    def test_parse_never_raises(self):
        for line in ["{", "}", "null", '"str"', "1e999999", "\x00"]:
            self.parser.parse(line)

    def test_oversized_integer_is_malformed(self):
        line = '{"message":{"content":"A"},"eval_count":' + "9" * 5000 + "}"
        result = self.parser.parse(line)
        assert isinstance(result, Malformed)
        assert result.raw == line

    def test_deep_nesting_is_malformed(self):
        assert isinstance(self.parser.parse("[" * 100_000 + "]" * 100_000), Malformed)
        assert isinstance(self.parser.parse('{"a":' * 100_000 + "1" + "}" * 100_000), Malformed)


class TestParseRecord:
    def test_module_level_helper(self):
        assert parse_record('{"message":{"content":"x"}}') == Delta("x")
        assert isinstance(parse_record(""), Skip)
