import pytest

from geigerlens.counts import TotalPackageCounts
from geigerlens.emoji_symbols import EmojiSymbols
from geigerlens.format import CrateDetectionStatus, OutputFormat, SymbolKind
from geigerlens.print_config import StyledText
from geigerlens.report import DependencyKind
from geigerlens.table import (
    construct_package_text_tree_line,
    crate_detection_status,
    text_tree_line_extra_deps_group_to_table_line_string,
)
from geigerlens.table_rows import table_row_empty


@pytest.mark.parametrize(
    "dep_kind, expected",
    [
        (DependencyKind.BUILD, table_row_empty() + "tree_vines" + "[build-dependencies]"),
        (DependencyKind.DEVELOPMENT, table_row_empty() + "tree_vines" + "[dev-dependencies]"),
        (DependencyKind.NORMAL, None),
    ],
)
def test_extra_deps_group_line(dep_kind, expected):
    assert text_tree_line_extra_deps_group_to_table_line_string(dep_kind, "tree_vines") == expected


def test_extra_deps_group_line_unknown_kind():
    with pytest.raises(ValueError):
        text_tree_line_extra_deps_group_to_table_line_string("other", "tree_vines")


@pytest.mark.parametrize(
    "status, output_format, symbol_kind, expected",
    [
        (
            CrateDetectionStatus.NONE_DETECTED_FORBIDS_UNSAFE,
            OutputFormat.GITHUB_MARKDOWN,
            SymbolKind.LOCK,
            "unsafe_info  \U0001f512  tree_vinespackage_name",
        ),
        (
            CrateDetectionStatus.UNSAFE_DETECTED,
            OutputFormat.GITHUB_MARKDOWN,
            SymbolKind.RADS,
            "unsafe_info  \u2622\ufe0f  tree_vinespackage_name",
        ),
    ],
)
def test_construct_package_text_tree_line(status, output_format, symbol_kind, expected):
    emoji_symbols = EmojiSymbols(output_format)
    icon = emoji_symbols.emoji(symbol_kind)
    line = construct_package_text_tree_line(
        status,
        emoji_symbols,
        icon,
        StyledText("package_name"),
        output_format,
        "tree_vines",
        StyledText("unsafe_info"),
    )
    assert line == expected


def test_construct_package_text_tree_line_ascii_fallback():
    emoji_symbols = EmojiSymbols(OutputFormat.ASCII)
    icon = emoji_symbols.emoji(SymbolKind.QUESTION_MARK)
    line = construct_package_text_tree_line(
        CrateDetectionStatus.NONE_DETECTED_ALLOWS_UNSAFE,
        emoji_symbols,
        icon,
        "package_name",
        OutputFormat.ASCII,
        "tree_vines",
        "unsafe_info",
    )
    assert line == "unsafe_info  ?  tree_vinespackage_name"


def test_construct_package_text_tree_line_ascii_unsafe_has_no_extra_space():
    emoji_symbols = EmojiSymbols(OutputFormat.ASCII)
    icon = emoji_symbols.emoji(SymbolKind.RADS)
    line = construct_package_text_tree_line(
        CrateDetectionStatus.UNSAFE_DETECTED,
        emoji_symbols,
        icon,
        "package_name",
        OutputFormat.ASCII,
        "tree_vines",
        "unsafe_info",
    )
    assert "\r" not in line
    assert line.startswith("unsafe_info  ")
    assert line.endswith("\x1b[0m tree_vinespackage_name")


@pytest.mark.parametrize(
    "forbids, total_inc, unsafe_found, expected_status, exp_forbids, exp_allows, exp_unsafe",
    [
        (True, 1, False, CrateDetectionStatus.NONE_DETECTED_FORBIDS_UNSAFE, 1, 0, 0),
        (True, 0, False, CrateDetectionStatus.NONE_DETECTED_FORBIDS_UNSAFE, 0, 0, 0),
        (False, 1, False, CrateDetectionStatus.NONE_DETECTED_ALLOWS_UNSAFE, 0, 1, 0),
        (False, 0, False, CrateDetectionStatus.NONE_DETECTED_ALLOWS_UNSAFE, 0, 0, 0),
        (False, 1, True, CrateDetectionStatus.UNSAFE_DETECTED, 0, 0, 1),
        (False, 0, True, CrateDetectionStatus.UNSAFE_DETECTED, 0, 0, 0),
    ],
)
def test_crate_detection_status(
    forbids, total_inc, unsafe_found, expected_status, exp_forbids, exp_allows, exp_unsafe
):
    counts = TotalPackageCounts()
    status = crate_detection_status(forbids, counts, total_inc, unsafe_found)
    assert status is expected_status
    assert counts.none_detected_forbids_unsafe == exp_forbids
    assert counts.none_detected_allows_unsafe == exp_allows
    assert counts.unsafe_detected == exp_unsafe


def test_crate_detection_status_unsafe_wins_over_forbid():
    counts = TotalPackageCounts()
    status = crate_detection_status(True, counts, 1, True)
    assert status is CrateDetectionStatus.UNSAFE_DETECTED
    assert counts.unsafe_detected == 1
    assert counts.none_detected_forbids_unsafe == 0


def test_crate_detection_status_accumulates():
    counts = TotalPackageCounts()
    for _ in range(3):
        crate_detection_status(False, counts, 1, True)
    crate_detection_status(True, counts, 1, False)
    assert counts.unsafe_detected == 3
    assert counts.none_detected_forbids_unsafe == 1
    assert counts.get_total_detection_status() is CrateDetectionStatus.UNSAFE_DETECTED