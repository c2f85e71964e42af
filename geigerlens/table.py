"""Turning text tree lines into rows of the report table."""

from __future__ import annotations

from typing import Optional, Union

from geigerlens.counts import TotalPackageCounts
from geigerlens.emoji_symbols import EmojiSymbols
from geigerlens.format import CrateDetectionStatus, OutputFormat, get_kind_group_name
from geigerlens.print_config import StyledText
from geigerlens.report import DependencyKind
from geigerlens.table_rows import table_row_empty

_Text = Union[str, StyledText]


def text_tree_line_extra_deps_group_to_table_line_string(
    dep_kind: DependencyKind, tree_vines: str
) -> Optional[str]:
    """Table line heading a group of build or dev dependencies; None for normal ones."""
    name = get_kind_group_name(dep_kind)
    if name is None:
        return None
    return f"{table_row_empty()}{tree_vines}{name}"


def construct_package_text_tree_line(
    status: CrateDetectionStatus,
    emoji_symbols: EmojiSymbols,
    icon: _Text,
    package_name: _Text,
    output_format: OutputFormat,
    tree_vines: str,
    unsafe_info: _Text,
) -> str:
    """Assemble a package row: counters, status icon, tree vines and package name."""
    shift_chars = len(unsafe_info) + 4
    line = f"{unsafe_info}  {icon:<2}"

    if emoji_symbols.will_output_emoji() and output_format is not OutputFormat.GITHUB_MARKDOWN:
        # Some terminals draw the emoji two cells wide but advance the cursor
        # by one; return to the line start and move right past the icon.
        line += "\r"
        line += f"\x1b[{shift_chars}C"
    elif (
        output_format is OutputFormat.GITHUB_MARKDOWN
        and status is CrateDetectionStatus.UNSAFE_DETECTED
    ):
        # The radiation symbol renders as a single character in markdown.
        line += " "

    return f"{line} {tree_vines}{package_name}"


def crate_detection_status(
    crate_forbids_unsafe: bool,
    counts: TotalPackageCounts,
    total_inc: int,
    unsafe_found: bool,
) -> CrateDetectionStatus:
    """Classify a package and add `total_inc` to the matching total in `counts`."""
    if unsafe_found:
        counts.unsafe_detected += total_inc
        return CrateDetectionStatus.UNSAFE_DETECTED
    if crate_forbids_unsafe:
        counts.none_detected_forbids_unsafe += total_inc
        return CrateDetectionStatus.NONE_DETECTED_FORBIDS_UNSAFE
    counts.none_detected_allows_unsafe += total_inc
    return CrateDetectionStatus.NONE_DETECTED_ALLOWS_UNSAFE