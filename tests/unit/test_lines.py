"""Tests for chatstream.stream.lines: framing across arbitrary chunk boundaries."""

from __future__ import annotations

import itertools

from chatstream.stream.decoder import TextDecoder
from chatstream.stream.lines import LineAssembler


def _lines_from_chunks(chunks: list[bytes]) -> list[str]:
    decoder = TextDecoder()
    assembler = LineAssembler()
    lines: list[str] = []
    for chunk in chunks:
        lines.extend(assembler.push(decoder.feed(chunk)))
    lines.extend(assembler.push(decoder.finish()))
    final = assembler.finish()
    if final is not None:
        lines.append(final)
    return lines


BODY = (
    '{"message":{"content":"café"}}\n'
    '{"message":{"content":"\U0001f916 hi"}}\n'
    '{"message":{"content":"日本"}}\n'
).encode()


class TestLineAssembler:
    def test_single_complete_line(self):
        a = LineAssembler()
        assert list(a.push("abc\n")) == ["abc"]
        assert a.carry == ""

    def test_partial_line_is_carried(self):
        a = LineAssembler()
        assert list(a.push("ab")) == []
        assert a.carry == "ab"
        assert list(a.push("c\nde")) == ["abc"]
        assert a.carry == "de"

    def test_many_lines_in_one_chunk(self):
        a = LineAssembler()
        assert list(a.push("a\nb\nc\n")) == ["a", "b", "c"]

    def test_blank_lines_are_emitted(self):
        a = LineAssembler()
        assert list(a.push("a\n\nb\n")) == ["a", "", "b"]

    def test_carry_updated_even_if_not_iterated(self):
        a = LineAssembler()
        a.push("x\ny")
        assert a.carry == "y"

    def test_finish_returns_unterminated_line(self):
        a = LineAssembler()
        list(a.push('{"a":1}\n{"b":'))
        list(a.push("2}"))
        assert a.finish() == '{"b":2}'
        assert a.carry == ""

    def test_finish_with_empty_carry(self):
        a = LineAssembler()
        list(a.push("done\n"))
        assert a.finish() is None

    def test_finish_clears_carry(self):
        a = LineAssembler()
        a.push("tail")
        a.finish()
        assert a.finish() is None


class TestChunkBoundaries:
    def test_whole_body(self):
        assert len(_lines_from_chunks([BODY])) == 3

    def test_every_two_way_split(self):
        expected = _lines_from_chunks([BODY])
        for i in range(len(BODY) + 1):
            assert _lines_from_chunks([BODY[:i], BODY[i:]]) == expected, i

    def test_every_three_way_split(self):
        expected = _lines_from_chunks([BODY])
        for i, j in itertools.combinations(range(len(BODY) + 1), 2):
            chunks = [BODY[:i], BODY[i:j], BODY[j:]]
            assert _lines_from_chunks(chunks) == expected, (i, j)

    def test_byte_at_a_time(self):
        chunks = [BODY[i:i + 1] for i in range(len(BODY))]
        assert _lines_from_chunks(chunks) == _lines_from_chunks([BODY])

    def test_final_unterminated_line_not_dropped(self):
        body = b'{"message":{"content":"A"}}\n{"message":{"content":"B"}}'
        for i in range(len(body) + 1):
            lines = _lines_from_chunks([body[:i], body[i:]])
            assert lines == ['{"message":{"content":"A"}}', '{"message":{"content":"B"}}']
