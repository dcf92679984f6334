"""Outcome types for parsing one NDJSON line."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Skip:
    """The line carried no usable delta (blank, or valid JSON without content)."""

    reason: str = ""


@dataclass(frozen=True, slots=True)
class Delta:
    """An incremental fragment of assistant text."""

    text: str


@dataclass(frozen=True, slots=True)
class Malformed:
    """The line could not be interpreted as a stream record."""

    raw: str
    reason: str = ""


ParseResult = Skip | Delta | Malformed
