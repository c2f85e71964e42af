"""Display patterns for package lines, built from format strings."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from geigerlens.format import Chunk, ChunkKind, FormatError, RawChunkKind
from geigerlens.krates import Krates
from geigerlens.parse import Parser

_log = logging.getLogger(__name__)

_ARGUMENTS = {
    "p": ChunkKind.PACKAGE,
    "l": ChunkKind.LICENSE,
    "r": ChunkKind.REPOSITORY,
}


@dataclass
class Pattern:
    """A sequence of chunks describing how to render a package."""

    chunks: list = field(default_factory=list)

    @classmethod
    def try_build(cls, format_string: str) -> Pattern:
        """Build a pattern; raises FormatError on malformed or unknown arguments."""
        chunks = []
        for raw in Parser(format_string):
            if raw.kind is RawChunkKind.TEXT:
                chunks.append(Chunk(ChunkKind.RAW, raw.value))
            elif raw.kind is RawChunkKind.ARGUMENT:
                try:
                    chunks.append(Chunk(_ARGUMENTS[raw.value]))
                except KeyError:
                    raise FormatError(f"unsupported pattern `{raw.value}`") from None
            else:
                raise FormatError(raw.value)
        return cls(chunks=chunks)

    def display(self, krates: Krates, package_id: str) -> str:
        """Render the pattern for a package; missing fields render as nothing."""
        parts = []
        for chunk in self.chunks:
            if chunk.kind is ChunkKind.LICENSE:
                licence = krates.licence(package_id)
                if licence is not None:
                    parts.append(licence)
            elif chunk.kind is ChunkKind.PACKAGE:
                name_and_version = krates.name_and_version(package_id)
                if name_and_version is not None:
                    name, version = name_and_version
                    parts.append(f"{name} {version}")
                else:
                    _log.warning("Failed to format Package: %s", package_id)
            elif chunk.kind is ChunkKind.RAW:
                parts.append(chunk.text)
            elif chunk.kind is ChunkKind.REPOSITORY:
                repository = krates.repository(package_id)
                if repository is not None:
                    parts.append(repository)
        return "".join(parts)