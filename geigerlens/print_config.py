"""Settings that control how the report is printed, and output colouring."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional

from geigerlens.args import Args
from geigerlens.format import CrateDetectionStatus, OutputFormat
from geigerlens.pattern import Pattern


class Prefix(enum.Enum):
    """How each dependency line is prefixed."""

    DEPTH = "depth"
    INDENT = "indent"
    NONE = "none"


class Direction(enum.Enum):
    """Direction in which dependency edges are followed."""

    INCOMING = "incoming"
    OUTGOING = "outgoing"


class IncludeTests(enum.Enum):
    """Whether unsafe usage in tests is counted."""

    YES = "yes"
    NO = "no"


_COLOR_CODES = {"green": "32", "red": "31"}


@dataclass(frozen=True)
class StyledText:
    """Text with an optional terminal colour and bold style."""

    text: str
    color: Optional[str] = None
    bold: bool = False

    def _codes(self) -> list:
        codes = ["1"] if self.bold else []
        if self.color is not None:
            codes.append(_COLOR_CODES[self.color])
        return codes

    def _wrap(self, body: str) -> str:
        codes = self._codes()
        if not codes:
            return body
        return f"\x1b[{';'.join(codes)}m{body}\x1b[0m"

    def __str__(self) -> str:
        return self._wrap(self.text)

    def __format__(self, spec: str) -> str:
        # Padding applies to the visible text, inside the escape codes.
        return self._wrap(format(self.text, spec))

    def __len__(self) -> int:
        return len(self.text)


@dataclass
class PrintConfig:
    """Options that shape the printed report."""

    all: bool = False
    allow_partial_results: bool = False
    direction: Direction = Direction.OUTGOING
    format: Pattern = field(default_factory=lambda: Pattern.try_build("p"))
    include_tests: IncludeTests = IncludeTests.YES
    prefix: Prefix = Prefix.DEPTH
    output_format: OutputFormat = OutputFormat.UTF8

    @classmethod
    def from_args(cls, args: Args) -> PrintConfig:
        """Build the print settings from parsed arguments; raises FormatError."""
        direction = Direction.INCOMING if args.invert else Direction.OUTGOING
        pattern = Pattern.try_build(args.format)
        include_tests = IncludeTests.YES if args.include_tests else IncludeTests.NO
        if args.prefix_depth:
            prefix = Prefix.DEPTH
        elif args.no_indent:
            prefix = Prefix.NONE
        else:
            prefix = Prefix.INDENT
        return cls(
            all=args.all,
            allow_partial_results=True,
            direction=direction,
            format=pattern,
            include_tests=include_tests,
            prefix=prefix,
            output_format=args.output_format,
        )


def colorize(
    status: CrateDetectionStatus, output_format: OutputFormat, text: str
) -> StyledText:
    """Style text by detection status; markdown output is never styled."""
    if output_format is OutputFormat.GITHUB_MARKDOWN:
        return StyledText(text)
    if status is CrateDetectionStatus.NONE_DETECTED_FORBIDS_UNSAFE:
        return StyledText(text, color="green")
    if status is CrateDetectionStatus.NONE_DETECTED_ALLOWS_UNSAFE:
        return StyledText(text)
    if status is CrateDetectionStatus.UNSAFE_DETECTED:
        return StyledText(text, color="red", bold=True)
    raise ValueError(f"unknown detection status: {status!r}")