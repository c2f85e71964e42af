"""Conversion of package id representations into package sources."""

from __future__ import annotations

import os
from pathlib import PurePosixPath, PureWindowsPath
from urllib.parse import SplitResult, parse_qsl, urlsplit, urlunsplit

from geigerlens.report import GitSource, PathSource, RegistrySource, Source

_SPECIAL_SCHEMES = frozenset({"http", "https", "ws", "wss", "ftp", "file"})


def _parse_url(text: str) -> SplitResult:
    parts = urlsplit(text)
    if not parts.scheme or ":" not in text:
        raise ValueError(f"relative URL without a base: {text!r}")
    if parts.scheme in _SPECIAL_SCHEMES and not parts.path:
        parts = parts._replace(path="/")
    return parts


def handle_source_repr(source_repr: str) -> Source:
    """Build a registry or git source from a source representation string."""
    parts = source_repr.split("+")
    source_type = parts[0]
    if source_type == "registry":
        return RegistrySource(name="crates.io", url=urlunsplit(_parse_url(parts[-1])))
    if source_type == "git":
        raw_url = _parse_url(parts[-1])
        if not raw_url.hostname:
            raise ValueError(f"git source has no host: {source_repr!r}")
        url = urlunsplit(_parse_url(f"{raw_url.scheme}://{raw_url.hostname}{raw_url.path}"))
        rev = next(
            (value for key, value in parse_qsl(raw_url.query, keep_blank_values=True) if key == "rev"),
            "",
        )
        return GitSource(url=url, rev=rev)
    raise ValueError(f"Unrecognised source type: {source_type}")


def handle_path_source(package_id_repr: str) -> PathSource:
    """Build a path source from a parenthesised `path+file://` package id."""
    pieces = package_id_repr[1:-1].split("+file://")[1:]
    if not pieces:
        raise ValueError(f"package id has no file path: {package_id_repr!r}")
    raw_path = pieces[-1]
    path = PureWindowsPath(raw_path[1:]) if os.name == "nt" else PurePosixPath(raw_path)
    if not path.is_absolute():
        raise ValueError(f"not an absolute path: {raw_path!r}")
    return PathSource(url=path.as_uri())