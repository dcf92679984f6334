"""Incremental byte-to-text decoding for streamed response bodies."""

from __future__ import annotations

import codecs


class TextDecoder:
    """Decode byte chunks to text without splitting multi-byte characters.

    Trailing bytes that do not yet form a complete character are held
    back until the next :meth:`feed` or until :meth:`finish`.  Invalid
    sequences decode to U+FFFD instead of raising.  For UTF-8 a leading
    byte-order mark is dropped, even when it arrives split over chunks.

    Parameters
    ----------
    encoding:
        Any codec name known to :mod:`codecs`.  Defaults to UTF-8.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        name = codecs.lookup(encoding).name
        if name == "utf-8":
            name = "utf-8-sig"
        self._encoding = name
        self._decoder = codecs.getincrementaldecoder(name)(errors="replace")

    @property
    def encoding(self) -> str:
        return self._encoding

    def feed(self, data: bytes) -> str:
        """Decode *data*, returning only complete characters."""
        return self._decoder.decode(data, final=False)

    def finish(self) -> str:
        """Flush held bytes; an incomplete tail becomes a replacement marker."""
        text = self._decoder.decode(b"", final=True)
        self._decoder.reset()
        return text
