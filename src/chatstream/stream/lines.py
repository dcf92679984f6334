"""Newline framing for a text stream that arrives in arbitrary pieces."""

from __future__ import annotations

from collections.abc import Iterator


class LineAssembler:
    """Buffers partial text across chunks and emits complete lines.

    The text after the last newline is kept in :attr:`carry` until a
    later chunk terminates it, or until :meth:`finish` is called when the
    stream ends.  Emitted lines have their ``\\n`` stripped; blank lines
    are emitted as ``""``.
    """

    def __init__(self) -> None:
        self.carry = ""

    def push(self, text: str) -> Iterator[str]:
        """Add *text* and return an iterator over the lines it completes.

        The carry is updated before this returns, whether or not the
        caller consumes the iterator.
        """
        parts = (self.carry + text).split("\n")
        self.carry = parts.pop()
        return iter(parts)

    def finish(self) -> str | None:
        """Return the unterminated final line, if any, and clear the carry."""
        line, self.carry = self.carry, ""
        return line or None
