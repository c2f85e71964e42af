"""Tokenizer for package display format strings such as `{p} {l}`."""

from __future__ import annotations

from typing import Iterator, Optional

from geigerlens.format import RawChunk, RawChunkKind


class Parser:
    """Splits a format string into text, argument and error chunks."""

    def __init__(self, s: str) -> None:
        self.s = s
        self._pos = 0

    def _peek(self) -> Optional[str]:
        return self.s[self._pos] if self._pos < len(self.s) else None

    def _consume(self, ch: str) -> bool:
        if self._peek() == ch:
            self._pos += 1
            return True
        return False

    def argument(self) -> RawChunk:
        return RawChunk(RawChunkKind.ARGUMENT, self.name())

    def name(self) -> str:
        """Read an identifier: a letter followed by letters or digits."""
        first = self._peek()
        if first is None or not first.isalpha():
            return ""
        start = self._pos
        self._pos += 1
        while (ch := self._peek()) is not None and ch.isalnum():
            self._pos += 1
        return self.s[start : self._pos]

    def text(self, start: int) -> RawChunk:
        """Read plain text from `start` up to the next brace or `)`."""
        self._pos = start
        while (ch := self._peek()) is not None:
            # A leading ')' is taken as text so that parsing always advances.
            if ch in "{}" or (ch == ")" and self._pos > start):
                break
            self._pos += 1
        return RawChunk(RawChunkKind.TEXT, self.s[start : self._pos])

    def __iter__(self) -> Iterator[RawChunk]:
        return self

    def __next__(self) -> RawChunk:
        ch = self._peek()
        if ch is None:
            raise StopIteration
        if ch == "{":
            self._pos += 1
            if self._consume("{"):
                return RawChunk(RawChunkKind.TEXT, "{")
            chunk = self.argument()
            if self._consume("}"):
                return chunk
            self._pos = len(self.s)
            return RawChunk(RawChunkKind.ERROR, "expected '}'")
        if ch == "}":
            self._pos += 1
            return RawChunk(RawChunkKind.ERROR, "unexpected '}'")
        return self.text(self._pos)