"""Shared types for formatting the report output."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from geigerlens.report import DependencyKind


class Charset(enum.Enum):
    """Character set used for tree drawing."""

    ASCII = "Ascii"
    GITHUB_MARKDOWN = "GitHubMarkdown"
    UTF8 = "Utf8"

    @classmethod
    def from_str(cls, s: str) -> Charset:
        """Parse a charset name, ignoring case."""
        try:
            return _CHARSETS[s.lower()]
        except KeyError:
            raise ValueError("invalid charset") from None


_CHARSETS = {
    "ascii": Charset.ASCII,
    "githubmarkdown": Charset.GITHUB_MARKDOWN,
    "utf8": Charset.UTF8,
}


class OutputFormat(enum.Enum):
    """Output format of the report."""

    ASCII = "Ascii"
    JSON = "Json"
    GITHUB_MARKDOWN = "GitHubMarkdown"
    RATIO = "Ratio"
    UTF8 = "Utf8"

    @classmethod
    def from_str(cls, s: str) -> OutputFormat:
        """Parse an output format name, matching case exactly."""
        try:
            return cls(s)
        except ValueError:
            raise ValueError(f"matching variant not found: {s!r}") from None


class ChunkKind(enum.Enum):
    LICENSE = "license"
    PACKAGE = "package"
    RAW = "raw"
    REPOSITORY = "repository"


@dataclass(frozen=True)
class Chunk:
    """A piece of a display pattern; `text` is used by raw chunks."""

    kind: ChunkKind
    text: str = ""


class CrateDetectionStatus(enum.Enum):
    NONE_DETECTED_FORBIDS_UNSAFE = "none_detected_forbids_unsafe"
    NONE_DETECTED_ALLOWS_UNSAFE = "none_detected_allows_unsafe"
    UNSAFE_DETECTED = "unsafe_detected"


class RawChunkKind(enum.Enum):
    ARGUMENT = "argument"
    ERROR = "error"
    TEXT = "text"


@dataclass(frozen=True)
class RawChunk:
    """A token produced by the format string parser."""

    kind: RawChunkKind
    value: str


class SymbolKind(enum.IntEnum):
    LOCK = 0
    QUESTION_MARK = 1
    RADS = 2


class FormatError(Exception):
    """Raised when a format pattern cannot be built."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        escaped = self.message.replace("\\", "\\\\").replace('"', '\\"')
        return f'FormatError {{ message: "{escaped}" }}'


_KIND_GROUP_NAMES = {
    DependencyKind.BUILD: "[build-dependencies]",
    DependencyKind.DEVELOPMENT: "[dev-dependencies]",
    DependencyKind.NORMAL: None,
}


def get_kind_group_name(dep_kind: DependencyKind) -> str | None:
    """Return the manifest section heading for a dependency kind, if any."""
    try:
        return _KIND_GROUP_NAMES[dep_kind]
    except (KeyError, TypeError):
        raise ValueError("Unrecognised Dependency Kind") from None