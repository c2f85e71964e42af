"""Status symbols shown next to each package, as emoji or plain fallbacks."""

from __future__ import annotations

import os
import sys
from typing import Union

from geigerlens.format import CrateDetectionStatus, OutputFormat, SymbolKind
from geigerlens.print_config import StyledText, colorize

_EMOJIS = ("\U0001f512", "\u2753", "\u2622\ufe0f")


def _stdout_wants_emoji() -> bool:
    stream = sys.stdout
    if stream is None:
        return False
    try:
        attended = stream.isatty()
    except (AttributeError, ValueError):
        return False
    return attended and (os.name != "nt" or "WT_SESSION" in os.environ)


class EmojiSymbols:
    """Chooses between emoji and plain symbols for an output format."""

    def __init__(self, output_format: OutputFormat) -> None:
        self.output_format = output_format
        self._fallbacks = (
            colorize(CrateDetectionStatus.NONE_DETECTED_FORBIDS_UNSAFE, output_format, ":)"),
            colorize(CrateDetectionStatus.NONE_DETECTED_ALLOWS_UNSAFE, output_format, "?"),
            colorize(CrateDetectionStatus.UNSAFE_DETECTED, output_format, "!"),
        )

    def emoji(self, kind: SymbolKind) -> Union[str, StyledText]:
        """The symbol for a kind: an emoji if it will be shown, else a fallback."""
        index = SymbolKind(kind).value
        if self.will_output_emoji():
            return _EMOJIS[index]
        return self._fallbacks[index]

    def will_output_emoji(self) -> bool:
        if self.output_format is OutputFormat.GITHUB_MARKDOWN:
            return True
        return self.output_format is OutputFormat.UTF8 and _stdout_wants_emoji()